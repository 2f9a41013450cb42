"""Calendly source — booking confirmation pages."""

from __future__ import annotations

from sidecar.catalog.models import DataType, Reader, Scenario, Source

EXTRACT_BOOKING_JS = r"""
(async () => {
  try {
    const text = (selector) => document.querySelector(selector)?.textContent?.trim();
    const meetingAnchor = document.querySelector('a[href*="zoom"], a[href*="meet.google"]');

    return {
      success: true,
      meeting: {
        title: text('h1, .event-title, [data-component="event-name"]'),
        dateTime: text('.event-date, [data-component="event-date"]'),
        organizer: text('.organizer-name, [data-component="organizer"]'),
        location: text('.location, [data-component="location"], a[href*="zoom"], a[href*="meet.google"]'),
        meetingLink: meetingAnchor ? meetingAnchor.getAttribute('href') : null,
        notes: text('.event-notes, .description, [data-component="notes"]'),
      },
      invitee: {
        name: text('.invitee-name, [data-component="invitee-name"]'),
        email: text('.invitee-email, [data-component="invitee-email"]'),
      },
      url: window.location.href,
      timestamp: new Date().toISOString(),
    };
  } catch (error) {
    return { success: false, error: error.message };
  }
})()
""".strip()

extract_booking = Reader(
    id="extract-booking",
    name="Extract Booking",
    description="Extracts meeting details, date, time, and participant info from Calendly confirmation",
    data_type=DataType.JSON,
    script=EXTRACT_BOOKING_JS,
    test_fixture="confirmation.html",
)

calendly_confirmation_scenario = Scenario(
    id="calendly-confirmation",
    name="Calendly Confirmation",
    url_pattern=r"calendly\.com/[^/]+/[^/]+/(confirmed|scheduled)",
    readers=[extract_booking],
)

calendly_source = Source(
    id="calendly",
    name="Calendly",
    domains=["calendly.com"],
    scenarios=[calendly_confirmation_scenario],
)
