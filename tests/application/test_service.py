"""Tests for the scheduler service orchestration."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from hsk_srs.application.service import SchedulerService
from hsk_srs.domain.cards.models import Card, WordEntry
from hsk_srs.domain.errors import (
    CardNotFoundError,
    InvalidLevelError,
    InvalidQualityError,
    InvalidRatingError,
)


class TestSaveWord:
    def test_creates_fresh_card(self, service, store, clock):
        assert service.save_word("你好", "hsk1", pinyin="nǐ hǎo", en="hello") is True

        card = store.get("你好")
        assert card.level == "1"
        assert card.repetitions == 0
        assert card.interval == 0
        assert card.easiness_factor == 2.5
        assert card.next_review == clock.now()
        assert card.last_review is None
        assert card.friction is False
        assert card.pinyin == "nǐ hǎo"

    def test_second_save_is_a_no_op(self, service, store):
        assert service.save_word("你好", "1", en="hello") is True
        assert service.save_word("你好", "2", en="changed") is False

        assert store.keys() == ["你好"]
        assert store.get("你好").level == "1"
        assert store.get("你好").en == "hello"

    def test_is_saved(self, service):
        assert service.is_saved("你好") is False
        service.save_word("你好", "1")
        assert service.is_saved("你好") is True

    def test_blank_key_rejected(self, service):
        with pytest.raises(ValueError):
            service.save_word("   ", "1")

    def test_friction_after_three_lookups(self, service, store):
        for _ in range(3):
            service.record_lookup("难")

        service.save_word("难", "4")

        card = store.get("难")
        assert card.friction is True
        assert card.easiness_factor == pytest.approx(2.2)

    def test_two_lookups_is_not_friction(self, service, store):
        service.record_lookup("容易")
        service.record_lookup("容易")

        service.save_word("容易", "2")

        assert store.get("容易").friction is False

    def test_threshold_is_configurable(self, store, lookups, clock):
        service = SchedulerService(store, lookups, clock, friction_threshold=0)
        service.record_lookup("字")

        service.save_word("字", "1")

        assert store.get("字").friction is True

    def test_padded_lookups_count_toward_the_same_word(self, service, store, lookups):
        for _ in range(3):
            service.record_lookup(" 难 ")

        service.save_word("难", "4")

        assert lookups.get("难") == 3
        assert store.get("难").friction is True
        assert service.is_saved(" 难") is True
        assert service.get_card("难 ") == store.get("难")

    def test_lookups_after_saving_do_not_change_friction(self, service, store):
        service.save_word("猫", "1")
        for _ in range(5):
            service.record_lookup("猫")

        assert store.get("猫").friction is False

    def test_level_spellings_written_canonically(self, service, store):
        service.save_word("爱", "HSK7-9")
        service.save_word("被", "hsk7-9")
        service.save_word("草", "7–9")

        assert {c.level for c in store.get_all()} == {"7-9"}
        assert [c.key for c in service.due_queue("7-9")] == ["爱", "被", "草"]

    def test_malformed_level_falls_back_and_warns(self, service, store, caplog):
        with caplog.at_level("WARNING"):
            service.save_word("谢谢", "beginner")

        assert store.get("谢谢").level == "1"
        assert "Unrecognized level" in caplog.text

    def test_strict_levels_raise(self, store, lookups, clock):
        service = SchedulerService(store, lookups, clock, strict_levels=True)

        with pytest.raises(InvalidLevelError):
            service.save_word("谢谢", "beginner")
        assert store.get("谢谢") is None


class TestReview:
    def test_review_persists_result(self, service, store, clock):
        service.save_word("你好", "1")
        clock.advance(hours=1)

        updated = service.review("你好", 4)

        assert store.get("你好") == updated
        assert updated.repetitions == 1
        assert updated.last_review == clock.now()
        assert updated.next_review == clock.now() + timedelta(days=1)

    def test_review_with_rating(self, service):
        service.save_word("你好", "1")
        first = service.review_with_rating("你好", "good")
        second = service.review_with_rating("你好", "easy")

        assert first.interval == 1
        assert second.interval == 6

    def test_friction_card_first_review_only(self, service, store):
        for _ in range(3):
            service.record_lookup("难")
        service.save_word("难", "4")

        first = service.review("难", 4)
        # 2.2 - 0.3 friction, then -0.03
        assert first.easiness_factor == pytest.approx(1.87)

        second = service.review("难", 4)
        assert second.easiness_factor == pytest.approx(1.84)
        assert second.interval == 6

    def test_padded_key_reviews_saved_card(self, service, store):
        service.save_word("你好", "1")

        updated = service.review(" 你好 ", 4)

        assert updated.key == "你好"
        assert store.keys() == ["你好"]
        assert store.get("你好").repetitions == 1

    def test_blank_key_review_rejected(self, service):
        with pytest.raises(ValueError):
            service.review("  ", 4)

    def test_explicit_friction_override(self, service):
        service.save_word("难", "4")
        service.review("难", 4)

        second = service.review("难", 4, friction=True)

        assert second.interval == 3

    def test_unknown_key(self, service):
        with pytest.raises(CardNotFoundError):
            service.review("无", 4)

    @pytest.mark.parametrize("quality", [0, 6])
    def test_out_of_range_quality(self, service, store, quality):
        service.save_word("你好", "1")

        with pytest.raises(InvalidQualityError):
            service.review("你好", quality)
        assert store.get("你好").last_review is None

    def test_unknown_rating(self, service):
        service.save_word("你好", "1")
        with pytest.raises(InvalidRatingError):
            service.review_with_rating("你好", "perfect")


class TestQueries:
    def test_reviewed_card_leaves_queue_until_due(self, service, clock):
        service.save_word("你好", "1")
        service.save_word("再见", "1")

        service.review("你好", 5)

        assert [c.key for c in service.due_queue(1)] == ["再见"]
        clock.advance(days=1)
        assert [c.key for c in service.due_queue("hsk1")] == ["你好", "再见"]

    def test_analytics_and_overview(self, service, clock):
        for key in ["一", "二", "三"]:
            service.save_word(key, "2")
        service.save_word("四", "5")
        service.review("一", 4)
        service.review("二", 1)

        summary = service.analytics("hsk2")
        assert (summary.new_count, summary.learning_count, summary.mastered_count) == (2, 0, 1)
        assert summary.total == 3

        clock.advance(days=2)
        overview = service.overview()
        assert list(overview) == ["1", "2", "3", "4", "5", "6", "7-9"]
        assert overview["2"].learning_count == 1
        assert overview["5"].new_count == 1
        assert service.due_count() == 4

    def test_import_words(self, service):
        entries = [
            WordEntry(key="你好", level="hsk1"),
            WordEntry(key="谢谢", level=1),
            WordEntry(key="你好", level="hsk1"),
        ]

        result = service.import_words(entries)

        assert result.created == ["你好", "谢谢"]
        assert result.skipped == ["你好"]


def test_service_reads_clock_once_per_review(store, lookups):
    clock = MagicMock()
    clock.now.return_value = datetime(2024, 1, 1, tzinfo=timezone.utc)
    store.put("你好", Card(key="你好", next_review=clock.now.return_value))
    clock.now.reset_mock()
    service = SchedulerService(store, lookups, clock)

    service.review("你好", 4)

    clock.now.assert_called_once()
