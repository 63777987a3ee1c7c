"""Tests for PushPositionSource and one-shot position requests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from run_scout.geo.models import Coordinate
from run_scout.tracking.position import (
    PositionError,
    PositionErrorReason,
    PushPositionSource,
    request_current_position,
)


def test_push_reaches_all_subscribers():
    source = PushPositionSource()
    a, b = MagicMock(), MagicMock()
    source.subscribe(a, MagicMock())
    source.subscribe(b, MagicMock())

    delivered = source.push(Coordinate(1.0, 2.0))

    assert delivered == 2
    a.assert_called_once_with(Coordinate(1.0, 2.0))
    b.assert_called_once_with(Coordinate(1.0, 2.0))


def test_unsubscribe_stops_delivery():
    source = PushPositionSource()
    on_fix = MagicMock()
    handle = source.subscribe(on_fix, MagicMock())
    source.unsubscribe(handle)
    assert source.push(Coordinate(0.0, 0.0)) == 0
    on_fix.assert_not_called()
    assert source.subscriber_count == 0


def test_unsubscribe_unknown_handle_is_safe():
    PushPositionSource().unsubscribe(999)


def test_handles_are_unique():
    source = PushPositionSource()
    h1 = source.subscribe(MagicMock(), MagicMock())
    h2 = source.subscribe(MagicMock(), MagicMock())
    assert h1 != h2


def test_push_error_reaches_error_callbacks():
    source = PushPositionSource()
    on_error = MagicMock()
    source.subscribe(MagicMock(), on_error)
    err = PositionError(PositionErrorReason.TIMEOUT)
    source.push_error(err)
    on_error.assert_called_once_with(err)


def test_subscribe_denied_raises_permission_error():
    source = PushPositionSource(denied=True)
    with pytest.raises(PositionError) as excinfo:
        source.subscribe(MagicMock(), MagicMock())
    assert excinfo.value.is_permission_denied


def test_set_denied_toggles_access():
    source = PushPositionSource(denied=True)
    source.set_denied(False)
    source.subscribe(MagicMock(), MagicMock())
    assert source.subscriber_count == 1


def test_position_error_defaults():
    err = PositionError()
    assert err.reason is PositionErrorReason.UNAVAILABLE
    assert not err.is_permission_denied
    assert str(err) == "unavailable"


# ---------------------------------------------------------------------------
# request_current_position
# ---------------------------------------------------------------------------


def test_request_current_position_returns_last_fix():
    source = PushPositionSource()
    source.push(Coordinate(-23.5, -46.6))
    assert request_current_position(source) == Coordinate(-23.5, -46.6)


def test_request_current_position_without_fix_raises_unavailable():
    with pytest.raises(PositionError) as excinfo:
        request_current_position(PushPositionSource())
    assert excinfo.value.reason is PositionErrorReason.UNAVAILABLE


def test_request_current_position_denied():
    with pytest.raises(PositionError) as excinfo:
        request_current_position(PushPositionSource(denied=True))
    assert excinfo.value.is_permission_denied


def test_request_current_position_times_out_on_silent_source():
    silent = MagicMock()
    silent.get_current_position.return_value = None
    with pytest.raises(PositionError) as excinfo:
        request_current_position(silent, timeout=0.01)
    assert excinfo.value.reason is PositionErrorReason.TIMEOUT
