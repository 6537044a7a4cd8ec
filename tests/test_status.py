#!/usr/bin/env python3
"""Tests for Status enum."""

import pytest

from models import Status


class TestStatus:
    """Tests for Status enum ordering."""

    def test_urgency_ordering(self):
        """Lower value = more urgent."""
        assert Status.OVERDUE.value < Status.DUE_SOON.value
        assert Status.DUE_SOON.value < Status.OK.value
        assert Status.OK.value < Status.NO_RECORD.value

    def test_labels(self):
        assert Status.OVERDUE.label == "overdue"
        assert Status.DUE_SOON.label == "due-soon"
        assert Status.OK.label == "ok"
        assert Status.NO_RECORD.label == "no-record"

    def test_from_label_round_trips(self):
        for status in Status:
            assert Status.from_label(status.label) is status

    def test_from_label_unknown(self):
        with pytest.raises(KeyError):
            Status.from_label("late")
