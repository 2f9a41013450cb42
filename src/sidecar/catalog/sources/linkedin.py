"""LinkedIn source — messaging and feed scenarios."""

from __future__ import annotations

from sidecar.catalog.models import DataType, Reader, Scenario, Source, Writer

EXTRACT_CONVERSATION_JS = r"""
(async () => {
  try {
    const messages = [];
    const contact = {};

    const profileLink = document.querySelector('.msg-thread__link-to-profile');
    if (profileLink) {
      contact.profileUrl = profileLink.getAttribute('href');
      contact.name = profileLink.getAttribute('title')?.replace('Open ', '')?.replace("'s profile", '') || null;
    }

    const entityTitle = document.querySelector('.msg-entity-lockup__entity-title');
    if (entityTitle && !contact.name) {
      contact.name = entityTitle.textContent?.trim();
    }

    const entityInfo = document.querySelector('.msg-entity-lockup__entity-info');
    if (entityInfo) {
      contact.headline = entityInfo.textContent?.trim();
    }

    const profileImage = document.querySelector('.msg-thread img, .msg-entity-lockup img');
    if (profileImage) {
      contact.photoUrl = profileImage.getAttribute('src');
      contact.photoAlt = profileImage.getAttribute('alt');
    }

    document.querySelectorAll('.msg-s-message-list__event').forEach((element, index) => {
      const dateHeading = element.querySelector('.msg-s-message-list__time-heading');
      const conversationDate = dateHeading?.textContent?.trim() || null;

      const item = element.querySelector('.msg-s-event-listitem');
      if (!item) return;

      // The event URN embeds a base64 blob containing the epoch-ms timestamp.
      let sentAt = null;
      const urn = item.getAttribute('data-event-urn');
      const urnMatch = urn ? urn.match(/2-([A-Za-z0-9]+)/) : null;
      if (urnMatch) {
        try {
          const stamp = atob(urnMatch[1]).match(/\d{13,}/);
          if (stamp) sentAt = new Date(parseInt(stamp[0]));
        } catch (e) {}
      }

      const text = item.querySelector('.msg-s-event-listitem__body')?.textContent?.trim() || '';
      const sender = item.querySelector('.msg-s-message-group__name')?.textContent?.trim() || 'Unknown';
      const time = item.querySelector('.msg-s-message-group__timestamp')?.textContent?.trim() || '';

      if (text.length > 0) {
        messages.push({
          index: index + 1,
          sender,
          text,
          time,
          conversationDate,
          absoluteDate: sentAt ? sentAt.toISOString() : null,
          dateDisplay: sentAt ? sentAt.toLocaleString() : null,
        });
      }
    });

    return {
      success: true,
      contact,
      totalMessages: messages.length,
      messages,
      url: window.location.href,
      timestamp: new Date().toISOString(),
      pageTitle: document.title,
    };
  } catch (error) {
    return { success: false, error: error.message };
  }
})()
""".strip()

INJECT_MESSAGE_JS = r"""
(async () => {
  try {
    const input = typeof __INPUT_DATA__ === 'undefined' ? null : __INPUT_DATA__;
    const messageText = typeof input === 'string' ? input : input?.text || '';
    if (!messageText) {
      return { success: false, error: 'No message text provided' };
    }

    const box = document.querySelector(
      '.msg-form__contenteditable, [contenteditable="true"].msg-form__msg-content-container--scrollable'
    );
    if (!box) {
      return { success: false, error: 'Message textarea not found' };
    }

    if (box.getAttribute('contenteditable') === 'true') {
      box.textContent = messageText;
    } else {
      box.value = messageText;
    }
    // LinkedIn enables the send button on input events only.
    box.dispatchEvent(new Event('input', { bubbles: true }));

    return { success: true, message: 'Text injected successfully', length: messageText.length };
  } catch (error) {
    return { success: false, error: error.message };
  }
})()
""".strip()

EXTRACT_POSTS_JS = r"""
(async () => {
  const posts = [];
  document.querySelectorAll('.feed-shared-update-v2').forEach((post, index) => {
    const author = post.querySelector('.update-components-actor__title')?.textContent?.trim() || null;
    const text = post.querySelector('.update-components-text')?.textContent?.trim() || '';
    const urn = post.getAttribute('data-urn');
    if (text || author) {
      posts.push({ index: index + 1, author, text, urn });
    }
  });
  return {
    success: true,
    totalPosts: posts.length,
    posts,
    url: window.location.href,
    timestamp: new Date().toISOString(),
  };
})()
""".strip()

extract_conversation = Reader(
    id="extract-conversation",
    name="Extract Conversation",
    description="Extracts all messages and contact info from the current LinkedIn chat",
    data_type=DataType.JSON,
    script=EXTRACT_CONVERSATION_JS,
    test_fixture="chat.html",
)

inject_message = Writer(
    id="inject-message",
    name="Inject Message",
    description="Injects text into the LinkedIn chat message box",
    script=INJECT_MESSAGE_JS,
    test_fixture="chat.html",
)

extract_posts = Reader(
    id="extract-posts",
    name="Extract Posts",
    description="Extracts visible posts from the LinkedIn feed",
    data_type=DataType.JSON,
    script=EXTRACT_POSTS_JS,
)

linkedin_chat_scenario = Scenario(
    id="linkedin-chat",
    name="LinkedIn Chat",
    url_pattern=r"linkedin\.com/messaging",
    readers=[extract_conversation],
    writers=[inject_message],
)

linkedin_feed_scenario = Scenario(
    id="linkedin-feed",
    name="LinkedIn Feed",
    url_pattern=r"linkedin\.com/feed",
    readers=[extract_posts],
)

linkedin_source = Source(
    id="linkedin",
    name="LinkedIn",
    domains=["linkedin.com", "www.linkedin.com"],
    scenarios=[linkedin_chat_scenario, linkedin_feed_scenario],
)
