"""
radiofeed — live metadata and playback for a SHOUTcast internet radio.

  collectors/  — scrape the status page and the 7.html line into records
  poller.py    — fixed-interval merge of both collectors into display state
  player/      — live-stream playback state machine (mpv)
  service.py   — aiohttp service exposing the JSON endpoints
  lib/         — config, fetch helper, relay ladder, errors, service plumbing
"""

__version__ = "0.1.0"
