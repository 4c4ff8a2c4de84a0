"""Camera framing controller against a fake viewport and a manual clock."""

from __future__ import annotations

import pytest

from guardwatch_feed.logging import LogEvent
from guardwatch_zone.camera import (
    CameraFramingController,
    FocusRequest,
    FocusState,
    FramingConfig,
    SimulatedViewport,
)
from guardwatch_zone.geometry.primitives import destination_point, haversine_distance_m
from guardwatch_zone.geometry.shapes import CircularZone, Coordinate, PolygonalZone

HUB = Coordinate(28.4950, 77.0895)
MALL = Coordinate(28.6315, 77.2167)

MALL_RING = (
    Coordinate(28.6330, 77.2150),
    Coordinate(28.6330, 77.2185),
    Coordinate(28.6300, 77.2185),
    Coordinate(28.6300, 77.2150),
)


def _lands_north(meters):
    return lambda center: destination_point(center, 0.0, meters)


def _make_controller(viewport, scheduler, event_log, **config):
    return CameraFramingController(
        viewport, scheduler, config=FramingConfig(**config) if config else None, logger=event_log
    )


@pytest.mark.unit
class TestCircleFraming:
    def test_converges_when_viewport_lands_on_target(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)

        controller.focus(CircularZone(HUB, 150.0))
        assert controller.state is FocusState.FRAMING

        scheduler.advance(1.0)
        assert controller.state is FocusState.CONVERGED
        assert controller.current.attempt_count == 1
        assert len(viewport.pan_calls()) == 1
        assert scheduler.pending == 0

    def test_landing_within_tolerance_converges(self, make_viewport, scheduler, event_log):
        viewport = make_viewport(settle=_lands_north(50.0))
        controller = _make_controller(viewport, scheduler, event_log)

        # radius 100 -> tolerance max(30, 60) = 60 m
        controller.focus(CircularZone(HUB, 100.0))
        scheduler.advance(1.0)

        assert controller.state is FocusState.CONVERGED

    def test_bounded_retries_then_gives_up(self, make_viewport, scheduler, event_log):
        viewport = make_viewport(settle=_lands_north(1_000.0))
        controller = _make_controller(viewport, scheduler, event_log)

        controller.focus(CircularZone(HUB, 100.0))
        scheduler.advance(60.0)

        assert len(viewport.pan_calls()) == 4
        assert controller.state is FocusState.GAVE_UP
        assert controller.current.attempt_count == 4
        assert scheduler.pending == 0
        assert LogEvent.FOCUS_GAVE_UP in event_log.events("WARNING")
        assert event_log.events().count(LogEvent.FOCUS_RETRY) == 3

    def test_attempt_budget_is_configurable(self, make_viewport, scheduler, event_log):
        viewport = make_viewport(settle=_lands_north(1_000.0))
        controller = _make_controller(viewport, scheduler, event_log, max_attempts=2)

        controller.focus(CircularZone(HUB, 100.0))
        scheduler.advance(60.0)

        assert len(viewport.pan_calls()) == 2
        assert controller.state is FocusState.GAVE_UP

    def test_retries_wait_for_backoff(self, make_viewport, scheduler, event_log):
        viewport = make_viewport(settle=_lands_north(1_000.0))
        controller = _make_controller(viewport, scheduler, event_log)

        controller.focus(CircularZone(HUB, 100.0))
        scheduler.advance(0.35)  # move complete at 0.1, retry due at 0.4
        assert len(viewport.pan_calls()) == 1

        scheduler.advance(0.1)
        assert len(viewport.pan_calls()) == 2

    def test_one_move_listener_at_a_time(self, make_viewport, scheduler, event_log):
        viewport = make_viewport(settle=_lands_north(1_000.0))
        controller = _make_controller(viewport, scheduler, event_log)

        controller.focus(CircularZone(HUB, 100.0))
        for _ in range(40):
            scheduler.advance(0.05)
            assert len(viewport.move_listeners) <= 1

        assert viewport.max_listeners_seen == 1
        assert viewport.move_listeners == {}

    def test_settle_timeout_checks_without_move_complete(self, make_viewport, scheduler, event_log):
        viewport = make_viewport(notify=False)
        controller = _make_controller(viewport, scheduler, event_log)

        controller.focus(CircularZone(HUB, 150.0))
        scheduler.advance(1.9)
        assert controller.state is FocusState.FRAMING

        scheduler.advance(0.2)
        assert controller.state is FocusState.CONVERGED
        assert LogEvent.VIEWPORT_SETTLE_TIMEOUT in event_log.events("DEBUG")

    def test_zero_radius_centers_at_fallback_zoom(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)

        controller.focus(CircularZone(HUB, 0.0))

        assert viewport.pan_calls() == [(0.0, "pan_zoom_to", HUB, 16.0)]
        assert controller.state is FocusState.CONVERGED
        assert viewport.move_listeners == {}


@pytest.mark.unit
class TestZoomMath:
    def test_huge_radius_clamps_to_min_zoom(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)
        assert controller.circle_zoom(CircularZone(HUB, 5_000_000.0), 800) == 3.0

    def test_tiny_radius_clamps_to_max_zoom(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)
        assert controller.circle_zoom(CircularZone(HUB, 1.0), 800) == 16.0

    def test_large_radius_stays_within_bounds(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)
        zoom = controller.circle_zoom(CircularZone(HUB, 50_000.0), 800)
        assert 3.0 <= zoom <= 16.0

    def test_commanded_zoom_is_clamped(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)
        controller.focus(CircularZone(HUB, 5_000_000.0))
        assert viewport.pan_calls()[0][3] == 3.0

    def test_tolerance_scales_with_radius(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)
        assert controller.tolerance_m(CircularZone(HUB, 10.0)) == 30.0
        assert controller.tolerance_m(CircularZone(HUB, 1_000.0)) == pytest.approx(600.0)

    def test_bigger_circle_means_lower_zoom(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)
        small = controller.circle_zoom(CircularZone(HUB, 100.0), 800)
        large = controller.circle_zoom(CircularZone(HUB, 1_000.0), 800)
        assert large < small


@pytest.mark.unit
class TestPolygonFraming:
    def test_polygon_is_one_shot_fit_bounds(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)

        controller.focus(PolygonalZone(MALL_RING))

        assert [call[1] for call in viewport.calls] == ["fit_bounds"]
        assert viewport.fit_padding == (96, 72)  # 12% of 800x600
        assert viewport.calls[0][3] == 16.0
        assert controller.state is FocusState.CONVERGED
        assert controller.current.attempt_count == 1

        scheduler.advance(10.0)
        assert len(viewport.calls) == 1

    def test_empty_polygon_without_fallback_gives_up(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)

        controller.focus(PolygonalZone(()))

        assert viewport.calls == []
        assert controller.state is FocusState.GAVE_UP

    def test_empty_polygon_uses_fallback_center(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)

        controller.focus(PolygonalZone(()), fallback_center=MALL)

        assert viewport.pan_calls() == [(0.0, "pan_zoom_to", MALL, 16.0)]
        assert controller.state is FocusState.CONVERGED

    def test_fit_bounds_failure_gives_up_quietly(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)
        viewport.fail_next = 1

        controller.focus(PolygonalZone(MALL_RING))

        assert controller.state is FocusState.GAVE_UP
        assert LogEvent.VIEWPORT_COMMAND_FAILED in event_log.events("WARNING")

    def test_overview_uses_fixed_padding(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)

        request_id = controller.frame_overview([HUB, MALL, *MALL_RING])

        assert request_id is not None
        assert viewport.fit_padding == (50, 50)
        assert controller.state is FocusState.CONVERGED

    def test_overview_with_nothing_to_frame(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)
        assert controller.frame_overview([]) is None
        assert viewport.calls == []


@pytest.mark.unit
class TestCommandFailures:
    def test_single_failure_is_absorbed_by_retry(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)
        viewport.fail_next = 1

        controller.focus(CircularZone(HUB, 150.0))
        assert controller.state is FocusState.FRAMING

        scheduler.advance(5.0)
        assert controller.state is FocusState.CONVERGED
        assert controller.current.attempt_count == 2
        assert LogEvent.VIEWPORT_COMMAND_FAILED in event_log.events("WARNING")

    def test_persistent_failure_gives_up(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)
        viewport.fail_next = 100

        controller.focus(CircularZone(HUB, 150.0))
        scheduler.advance(60.0)

        assert controller.state is FocusState.GAVE_UP
        assert len(viewport.pan_calls()) == 4
        assert viewport.move_listeners == {}

    def test_unknown_zone_type(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)
        with pytest.raises(TypeError):
            controller.submit(FocusRequest(target_zone="site-1", viewport_size_px=(800, 600)))


@pytest.mark.unit
class TestSupersession:
    def test_no_commands_from_superseded_request(self, make_viewport, scheduler, event_log):
        # Only the second target is ever reached
        viewport = make_viewport(
            settle=lambda center: center if center == MALL else destination_point(center, 0.0, 1_000.0)
        )
        controller = _make_controller(viewport, scheduler, event_log)

        controller.focus(CircularZone(HUB, 100.0))
        scheduler.advance(0.15)  # first settle check failed, retry armed
        first = controller.current

        b_started = scheduler.now
        controller.focus(CircularZone(MALL, 100.0))
        scheduler.advance(30.0)

        after_b = [call for call in viewport.pan_calls() if call[0] >= b_started]
        assert after_b
        assert all(call[2] == MALL for call in after_b)

        assert first.state is FocusState.CANCELLED
        assert first.cancelled is True
        assert first.pending_timers == []
        assert first.detach_listener is None
        assert controller.state is FocusState.CONVERGED

    def test_superseding_a_finished_request_keeps_its_state(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)

        controller.focus(PolygonalZone(MALL_RING))
        first = controller.current
        controller.focus(CircularZone(HUB, 100.0))

        assert first.state is FocusState.CONVERGED

    def test_subscribers_see_cancel_and_new_request(self, make_viewport, scheduler, event_log):
        viewport = make_viewport(settle=_lands_north(1_000.0))
        controller = _make_controller(viewport, scheduler, event_log)
        seen = []
        controller.subscribe(lambda request_id, state: seen.append((request_id, state)))

        first_id = controller.focus(CircularZone(HUB, 100.0))
        second_id = controller.focus(CircularZone(MALL, 100.0))

        assert seen == [
            (first_id, FocusState.FRAMING),
            (first_id, FocusState.CANCELLED),
            (second_id, FocusState.FRAMING),
        ]


@pytest.mark.unit
class TestLifecycle:
    def test_subscribe_and_unsubscribe(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)
        seen = []
        unsubscribe = controller.subscribe(lambda request_id, state: seen.append(state))

        controller.focus(PolygonalZone(MALL_RING))
        assert seen == [FocusState.FRAMING, FocusState.CONVERGED]

        unsubscribe()
        controller.focus(PolygonalZone(MALL_RING))
        assert len(seen) == 2

    def test_idle_before_first_request(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)
        assert controller.state is FocusState.IDLE
        assert controller.current is None

    def test_resize_refocuses_last_request(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)

        first_id = controller.focus(CircularZone(HUB, 150.0))
        scheduler.advance(1.0)

        viewport.resize(1024, 768)

        assert controller.current.request_id == first_id + 1
        assert controller.current.request.viewport_size_px == (1024, 768)
        scheduler.advance(1.0)
        assert controller.state is FocusState.CONVERGED
        assert len(viewport.pan_calls()) == 2

    def test_resize_before_any_request_does_nothing(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)
        viewport.resize(1024, 768)
        assert controller.current is None
        assert viewport.calls == []

    def test_close_cancels_and_detaches(self, make_viewport, scheduler, event_log):
        viewport = make_viewport(settle=_lands_north(1_000.0))
        controller = _make_controller(viewport, scheduler, event_log)

        controller.focus(CircularZone(HUB, 100.0))
        scheduler.advance(0.15)
        controller.close()

        assert controller.state is FocusState.CANCELLED
        assert viewport.resize_listeners == {}
        assert viewport.move_listeners == {}

        issued = len(viewport.calls)
        scheduler.advance(30.0)
        viewport.resize(640, 480)
        assert len(viewport.calls) == issued

        with pytest.raises(RuntimeError):
            controller.focus(CircularZone(HUB, 100.0))

    def test_cancel_is_idempotent(self, viewport, scheduler, event_log):
        controller = _make_controller(viewport, scheduler, event_log)
        controller.focus(CircularZone(HUB, 150.0))

        controller.cancel()
        controller.cancel()

        assert event_log.events().count(LogEvent.FOCUS_CANCELLED) == 1


@pytest.mark.unit
class TestSimulatedViewport:
    def _make(self, scheduler, **kwargs):
        return SimulatedViewport(scheduler, center=Coordinate(28.6139, 77.2090), zoom=10, size_wh=(800, 600), **kwargs)

    def test_controller_converges_on_simulated_viewport(self, scheduler, event_log):
        viewport = self._make(scheduler)
        controller = CameraFramingController(viewport, scheduler, logger=event_log)

        zone = CircularZone(HUB, 150.0)
        controller.focus(zone)
        scheduler.advance(5.0)

        assert controller.state is FocusState.CONVERGED
        assert viewport.get_center() == HUB
        assert viewport.zoom == pytest.approx(controller.circle_zoom(zone, 800))

    def test_settle_offset_exhausts_attempts(self, scheduler, event_log):
        viewport = self._make(scheduler, settle_offset_m=1_000.0)
        controller = CameraFramingController(viewport, scheduler, logger=event_log)

        controller.focus(CircularZone(HUB, 100.0))
        scheduler.advance(60.0)

        assert controller.state is FocusState.GAVE_UP
        assert [name for name, _, _ in viewport.commands] == ["pan_zoom_to"] * 4
        assert haversine_distance_m(viewport.get_center(), HUB) == pytest.approx(1_000.0, rel=1e-6)

    def test_new_command_interrupts_animation(self, scheduler):
        viewport = self._make(scheduler)

        viewport.pan_zoom_to(HUB, 14)
        scheduler.advance(0.1)
        viewport.pan_zoom_to(MALL, 15)
        scheduler.advance(1.0)

        assert viewport.get_center() == MALL
        assert viewport.zoom == 15

    def test_move_complete_fires_once_per_finished_move(self, scheduler):
        viewport = self._make(scheduler)
        fired = []
        detach = viewport.on_move_complete(lambda: fired.append(viewport.get_center()))

        viewport.pan_zoom_to(HUB, 14)
        viewport.pan_zoom_to(MALL, 14)
        scheduler.advance(1.0)
        assert fired == [MALL]

        detach()
        viewport.pan_zoom_to(HUB, 14, animate=False)
        assert fired == [MALL]
        assert viewport.move_listener_count == 0

    def test_fit_bounds_respects_max_zoom(self, scheduler):
        viewport = self._make(scheduler)
        controller = CameraFramingController(viewport, scheduler)

        # Near-empty polygon: all vertices on one point
        controller.focus(PolygonalZone((HUB, HUB, HUB)))
        scheduler.advance(1.0)

        assert viewport.zoom == 16.0
        assert viewport.get_center() == HUB
