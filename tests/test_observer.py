from __future__ import annotations

import logging

from osm_parquetizer.observer import CompositeObserver
from osm_parquetizer.observer import LoggingObserver
from osm_parquetizer.observer import ProgressObserver

from conftest import RecordingObserver


def run(observer, entities):
    observer.started()
    for entity in entities:
        observer.processed(entity)
    observer.ended()


def test_logging_observer_counts_per_kind(sample_entities, caplog):
    observer = LoggingObserver(log_every=2)

    with caplog.at_level(logging.INFO, logger="osm_parquetizer.observer"):
        run(observer, sample_entities)

    assert observer.total == 5
    assert "Entities processed: 4" in caplog.text
    assert "Total entities processed: 5 (nodes=2, ways=2, relations=1)" in caplog.text


def test_logging_observer_restarts_counting(sample_entities):
    observer = LoggingObserver()
    run(observer, sample_entities)
    run(observer, sample_entities[:1])

    assert observer.total == 1


def test_progress_observer_closes_bar(sample_entities):
    observer = ProgressObserver()
    run(observer, sample_entities)

    assert observer._pbar is None


def test_composite_observer_fans_out(sample_entities):
    first, second = RecordingObserver(), RecordingObserver()

    run(CompositeObserver([first, second]), sample_entities)

    assert first.events == second.events
    assert first.events[0] == "started"
    assert first.events[-1] == "ended"
    assert first.processed_ids == [e.id for e in sample_entities]
