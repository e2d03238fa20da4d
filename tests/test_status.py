"""Tests for the relay ladder and the StatusCollector."""

from conftest import SHOUTCAST_PAGE, Counter, reply, reply_json, stall
from radiofeed.collectors.status import StatusCollector
from radiofeed.lib.relays import (
    DirectSource,
    EnvelopeRelay,
    PassthroughRelay,
    create_relay_ladder,
)
from radiofeed.models import UNAVAILABLE_LABEL, StatusInfo


def relay_template(server, path):
    return str(server.make_url(path)) + "?url={url}"


class TestCreateRelayLadder:

    def test_builds_relays_then_direct(self, session):
        ladder = create_relay_ladder(session, [
            {"name": "allorigins", "url": "https://api.allorigins.win/get?url={url}", "envelope": "contents"},
            {"name": "corsproxy", "url": "https://corsproxy.io/?{url}"},
        ], timeout=3)
        assert [type(s) for s in ladder] == [EnvelopeRelay, PassthroughRelay, DirectSource]
        assert [s.name for s in ladder] == ["allorigins", "corsproxy", "direct"]
        assert all(s.timeout == 3 for s in ladder)

    def test_entries_without_url_are_skipped(self, session):
        ladder = create_relay_ladder(session, [{"name": "broken"}], timeout=1)
        assert [s.name for s in ladder] == ["direct"]

    def test_empty_config_is_direct_only(self, session):
        assert [s.name for s in create_relay_ladder(session)] == ["direct"]

    def test_url_placeholders(self, session):
        encoded, raw = create_relay_ladder(session, [
            {"name": "a", "url": "https://relay.example/get?url={url}"},
            {"name": "b", "url": "https://relay.example/{raw}"},
        ])[:2]
        target = "http://host:8342/"
        assert encoded.url_for(target) == "https://relay.example/get?url=http%3A%2F%2Fhost%3A8342%2F"
        assert raw.url_for(target) == "https://relay.example/http://host:8342/"


class TestStatusCollector:

    async def test_last_relay_wins_without_direct_fetch(self, serve, session):
        direct = Counter(reply(SHOUTCAST_PAGE))
        server = await serve({
            "/slow": stall(2),
            "/broken": reply("relay down", status=502),
            "/bad-envelope": reply_json({"status": {"http_code": 200}}),
            "/good": reply_json({"contents": SHOUTCAST_PAGE}),
            "/page": direct.handle,
        })
        ladder = [
            PassthroughRelay(session, "slow", relay_template(server, "/slow"), timeout=0.2),
            PassthroughRelay(session, "broken", relay_template(server, "/broken"), timeout=1),
            EnvelopeRelay(session, "bad-envelope", relay_template(server, "/bad-envelope"), timeout=1),
            EnvelopeRelay(session, "good", relay_template(server, "/good"), timeout=1),
            DirectSource(session, timeout=1),
        ]
        collector = StatusCollector(session, str(server.make_url("/page")), ladder=ladder)

        report = await collector.fetch_report()

        assert report.info == StatusInfo(dj="DJ Mike", program="Pop Hits")
        assert report.server_status == "online"
        assert report.debug["proxyUsed"] == "good"
        assert [a["outcome"] for a in report.debug["attempts"]] == [
            "NetworkTimeout", "UpstreamHTTPError", "MalformedPayload", "ok"]
        assert direct.hits == 0

    async def test_falls_back_to_direct(self, serve, session):
        direct = Counter(reply(SHOUTCAST_PAGE))
        server = await serve({"/broken": reply("", status=500), "/page": direct.handle})
        ladder = [
            PassthroughRelay(session, "broken", relay_template(server, "/broken"), timeout=1),
            DirectSource(session, timeout=1),
        ]
        collector = StatusCollector(session, str(server.make_url("/page")), ladder=ladder)

        assert await collector.fetch_status() == StatusInfo(dj="DJ Mike", program="Pop Hits")
        assert direct.hits == 1

    async def test_data_envelope_field(self, serve, session):
        server = await serve({"/relay": reply_json({"data": SHOUTCAST_PAGE})})
        ladder = [EnvelopeRelay(session, "r", relay_template(server, "/relay"), timeout=1)]
        collector = StatusCollector(session, "http://upstream.invalid/", ladder=ladder)
        assert (await collector.fetch_status()).dj == "DJ Mike"

    async def test_everything_fails_gives_offline_placeholder(self, serve, session):
        server = await serve({
            "/r1": reply("", status=500),
            "/r2": reply_json({"contents": ""}),
            "/page": reply("", status=503),
        })
        ladder = [
            PassthroughRelay(session, "r1", relay_template(server, "/r1"), timeout=1),
            EnvelopeRelay(session, "r2", relay_template(server, "/r2"), timeout=1),
            DirectSource(session, timeout=1),
        ]
        collector = StatusCollector(session, str(server.make_url("/page")), ladder=ladder)

        report = await collector.fetch_report()

        assert report.server_status == "offline"
        assert report.to_dict()["serverStatus"] == "offline"
        assert report.radio_title == "Radio Teste"
        assert report.genre == "Variados"
        assert report.current_song == UNAVAILABLE_LABEL
        assert report.current_listeners == 0
        assert [a["source"] for a in report.debug["proxyTried"]] == ["r1", "r2", "direct"]
        assert report.info == StatusInfo()

    async def test_unreachable_direct_only(self, session):
        collector = StatusCollector(session, "http://127.0.0.1:1/",
                                    ladder=[DirectSource(session, timeout=1)])
        assert await collector.fetch_status() == StatusInfo()

    async def test_unexpected_error_is_absorbed(self, session):
        class Exploding(DirectSource):
            def url_for(self, target):
                raise RuntimeError("boom")

        collector = StatusCollector(session, "http://upstream.invalid/",
                                    ladder=[Exploding(session)])
        report = await collector.fetch_report()
        assert report.server_status == "offline"
        assert report.debug == {"error": "boom"}
