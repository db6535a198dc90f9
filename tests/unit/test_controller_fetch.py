"""Unit tests for CacheController fetch interception."""

from __future__ import annotations

import logging

import pytest

from klangreise.core.models import Request, Response


ORIGIN = "https://klangreise.example"


def _doc(path: str) -> Request:
    return Request.for_path(ORIGIN, path, destination="document")


@pytest.mark.core
@pytest.mark.tra("CacheController.handle_fetch")
@pytest.mark.tier(0)
class TestPassThrough:
    """Requests the controller must leave to the network."""

    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE"])
    def test_non_get_not_intercepted(self, active_controller, method: str) -> None:
        """Non-GET requests should leave the event unhandled."""
        event = active_controller.dispatch(Request(url=f"{ORIGIN}/api", method=method))
        assert not event.handled

    def test_cross_origin_not_intercepted(self, active_controller) -> None:
        """Requests to other origins should leave the event unhandled."""
        event = active_controller.dispatch(
            Request(url="https://fonts.example/inter.woff2", destination="font")
        )
        assert not event.handled

    def test_not_intercepted_before_activation(self, controller) -> None:
        """An installed but inactive controller should not answer."""
        controller.install().result()
        event = controller.dispatch(_doc("/"))
        assert not event.handled

    def test_unhandled_fetch_goes_to_network(self, active_controller, fake_network) -> None:
        """fetch() should send unhandled requests straight to the network."""
        fake_network.pages["/api"] = b"created"

        response = active_controller.fetch(Request(url=f"{ORIGIN}/api", method="POST"))

        assert response.read() == b"created"
        assert fake_network.counts["/api"] == 1
        assert active_controller.store.match(Request.for_path(ORIGIN, "/api")) is None


@pytest.mark.core
@pytest.mark.tra("CacheController.handle_fetch")
@pytest.mark.tier(0)
class TestDocuments:
    """Network-first handling of navigations."""

    def test_online_returns_live_response_and_caches(
        self, active_controller, fake_network
    ) -> None:
        """Online navigations return the network response and store a copy."""
        fake_network.pages["/kapitel-2"] = b"<html>chapter</html>"

        response = active_controller.fetch(_doc("/kapitel-2"))

        assert response.served_from == "network"
        assert response.read() == b"<html>chapter</html>"
        cached = active_controller.store.match(_doc("/kapitel-2"))
        assert cached is not None
        assert cached.read() == b"<html>chapter</html>"

    def test_online_refreshes_cached_copy(self, active_controller, fake_network) -> None:
        """A fresh network copy should replace the stored one."""
        fake_network.pages["/"] = b"<html>v2</html>"

        active_controller.fetch(_doc("/")).read()

        cached = active_controller.store.match(_doc("/"))
        assert cached is not None
        assert cached.read() == b"<html>v2</html>"

    def test_network_is_tried_first(self, active_controller, fake_network) -> None:
        """Even with a cached copy the network is asked first."""
        before = fake_network.counts["/index.html"]
        active_controller.fetch(_doc("/index.html"))
        assert fake_network.counts["/index.html"] == before + 1

    def test_offline_serves_exact_match(self, active_controller, fake_network) -> None:
        """Offline navigations prefer the exact stored page."""
        fake_network.pages["/kapitel-2"] = b"<html>chapter</html>"
        active_controller.fetch(_doc("/kapitel-2")).read()
        fake_network.offline = True

        response = active_controller.fetch(_doc("/kapitel-2"))

        assert response.served_from == "cache"
        assert response.read() == b"<html>chapter</html>"

    def test_offline_falls_back_to_index(self, active_controller, fake_network) -> None:
        """Offline navigations without an entry get the stored /index.html."""
        fake_network.offline = True

        response = active_controller.fetch(_doc("/never-visited"))

        assert response.served_from == "cache"
        assert response.url == f"{ORIGIN}/index.html"
        assert response.read() == b"<html>home</html>"

    def test_offline_falls_back_to_root(self, memory_storage, fake_network) -> None:
        """Without /index.html the stored / is used."""
        from klangreise import CacheController

        controller = CacheController(
            memory_storage, fake_network, origin=ORIGIN, core_assets=["/"]
        )
        controller.install().result()
        controller.activate().result()
        fake_network.offline = True

        response = controller.fetch(_doc("/elsewhere"))

        assert response.url == f"{ORIGIN}/"

    def test_offline_without_fallback_fails(self, memory_storage, fake_network) -> None:
        """With nothing stored an offline navigation fails."""
        from klangreise import CacheController
        from klangreise.core.exceptions import NetworkError, RequestFailedError

        controller = CacheController(
            memory_storage, fake_network, origin=ORIGIN, core_assets=["/manifest.json"]
        )
        controller.install().result()
        controller.activate().result()
        fake_network.offline = True

        with pytest.raises(RequestFailedError) as exc_info:
            controller.fetch(_doc("/"))
        assert isinstance(exc_info.value.cause, NetworkError)

    def test_error_status_is_returned_and_stored(
        self, active_controller, fake_network
    ) -> None:
        """A 404 is a response: returned to the page and stored like any other."""
        response = active_controller.fetch(_doc("/gone"))

        assert response.status == 404
        cached = active_controller.store.match(_doc("/gone"))
        assert cached is not None
        assert cached.status == 404

    def test_fallback_logged(
        self, active_controller, fake_network, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Taking an offline fallback should be logged at WARNING."""
        fake_network.offline = True

        with caplog.at_level(logging.WARNING, logger="klangreise.core.strategies"):
            active_controller.fetch(_doc("/never-visited"))

        assert "offline fallback" in caplog.text


@pytest.mark.core
@pytest.mark.tra("CacheController.handle_fetch")
@pytest.mark.tier(0)
class TestMedia:
    """Network-only handling of audio and video."""

    def _media(self, path: str = "/sounds/meer.mp3") -> Request:
        return Request.for_path(ORIGIN, path, destination="audio")

    def test_online_never_writes(self, active_controller, fake_network) -> None:
        """Media responses should never be stored."""
        fake_network.pages["/sounds/meer.mp3"] = b"ID3"

        response = active_controller.fetch(self._media())

        assert response.read() == b"ID3"
        assert active_controller.store.match(self._media()) is None

    def test_offline_serves_stored_media(self, active_controller, fake_network) -> None:
        """Offline media is answered from the store when an entry exists."""
        active_controller.store.put(self._media(), Response(b"ID3 cached"))
        fake_network.offline = True

        response = active_controller.fetch(self._media())

        assert response.served_from == "cache"
        assert response.read() == b"ID3 cached"

    def test_offline_without_entry_fails(self, active_controller, fake_network) -> None:
        """Offline media without an entry fails, with no substitution."""
        from klangreise.core.exceptions import RequestFailedError

        fake_network.offline = True

        with pytest.raises(RequestFailedError):
            active_controller.fetch(self._media())

    def test_video_uses_media_strategy(self, active_controller, fake_network) -> None:
        """Video requests follow the same strategy as audio."""
        fake_network.pages["/clips/wald.mp4"] = b"mp4"
        request = Request.for_path(ORIGIN, "/clips/wald.mp4", destination="video")

        active_controller.fetch(request).read()

        assert active_controller.store.match(request) is None


@pytest.mark.core
@pytest.mark.tra("CacheController.handle_fetch")
@pytest.mark.tier(0)
class TestOtherAssets:
    """Cache-first handling of everything else."""

    def test_cached_asset_never_hits_network(self, active_controller, fake_network) -> None:
        """A core asset should be answered from the store."""
        request = Request.for_path(ORIGIN, "/assets/images/icon-192.png", "image")
        before = fake_network.counts[request.path]

        response = active_controller.fetch(request)

        assert response.served_from == "cache"
        assert response.read() == b"png-192"
        assert fake_network.counts[request.path] == before

    def test_second_request_never_hits_network(self, active_controller, fake_network) -> None:
        """A miss is filled from the network, the repeat comes from the store."""
        fake_network.pages["/app.js"] = b"console.log(1)"
        request = Request.for_path(ORIGIN, "/app.js", "script")

        first = active_controller.fetch(request)
        second = active_controller.fetch(request)

        assert first.served_from == "network"
        assert second.served_from == "cache"
        assert second.read() == b"console.log(1)"
        assert fake_network.counts["/app.js"] == 1

    def test_miss_while_offline_fails(self, active_controller, fake_network) -> None:
        """An uncached asset cannot be served offline."""
        from klangreise.core.exceptions import RequestFailedError

        fake_network.offline = True

        with pytest.raises(RequestFailedError):
            active_controller.fetch(Request.for_path(ORIGIN, "/app.js", "script"))

    def test_cached_asset_served_offline(self, active_controller, fake_network) -> None:
        """Stored assets keep working offline."""
        fake_network.offline = True

        response = active_controller.fetch(Request.for_path(ORIGIN, "/manifest.json"))

        assert response.read() == b'{"name": "Klangreise"}'


@pytest.mark.core
@pytest.mark.tier(0)
class TestBackgroundWrites:
    """Cache writes happen off the response path."""

    def test_write_registered_with_event(self, active_controller, fake_network) -> None:
        """The background write should extend the fetch event."""
        fake_network.pages["/app.js"] = b"x"

        event = active_controller.dispatch(Request.for_path(ORIGIN, "/app.js", "script"))

        # Only the cache write; the response future is not lifetime work
        assert len(event.pending) == 1
        assert event.response() is not None
        assert event.settle() == []

    def test_failed_write_does_not_affect_page(
        self, active_controller, fake_network, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A rejected write is logged and the page still gets its response."""
        from klangreise.core.exceptions import CacheWriteError

        class PartialNetwork:
            def fetch(self, request: Request) -> Response:
                return Response(b"part", status=206, url=request.url)

        active_controller._network = PartialNetwork()
        request = Request.for_path(ORIGIN, "/app.js", "script")

        with caplog.at_level(logging.WARNING, logger="klangreise.core.services"):
            event = active_controller.dispatch(request)
            response = event.response()

        assert response is not None
        assert response.status == 206
        assert response.read() == b"part"
        errors = event.settle()
        assert len(errors) == 1
        assert isinstance(errors[0], CacheWriteError)
        assert "Cache write for" in caplog.text

    def test_thread_pool_write_lands_after_settle(self, memory_storage, fake_network) -> None:
        """On a thread pool the entry exists once the event settles."""
        from klangreise import CacheController, ThreadPoolExecutorAdapter

        fake_network.pages["/app.js"] = b"x"
        with ThreadPoolExecutorAdapter(max_workers=4) as executor:
            controller = CacheController(
                memory_storage, fake_network, origin=ORIGIN, executor=executor
            )
            controller.install().result(timeout=5)
            controller.activate().result(timeout=5)

            request = Request.for_path(ORIGIN, "/app.js", "script")
            event = controller.dispatch(request)
            assert event.response(timeout=5).read() == b"x"
            assert event.settle(timeout=5) == []

            assert controller.store.match(request) is not None
