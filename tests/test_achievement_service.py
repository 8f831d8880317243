import pytest

from loyaltyapi.core.achievements import STAT_BINGO_COLLECTED, STAT_GAMES_VISITED
from loyaltyapi.core.exceptions import (
    AlreadyClaimedError,
    NoRewardAvailableError,
    NotFoundError,
    NotUnlockedError,
)
from loyaltyapi.database.session import unit_of_work
from loyaltyapi.models import UserStats
from loyaltyapi.services.achievement_service import AchievementService, visit_reward_progress


@pytest.fixture
def service(db_session, settings):
    return AchievementService(db_session, settings)


@pytest.fixture
def make_stats(db_session):
    def _make(telegram_id: int, **counters) -> None:
        db_session.add(UserStats(telegram_id=telegram_id, **counters))
        db_session.commit()

    return _make


class TestEvaluate:
    """업적 자동 해금 테스트"""

    def test_unlocks_every_reached_threshold(self, service, make_profile):
        # Given
        make_profile(7001)

        # When
        with unit_of_work(service.db):
            unlocked = service.evaluate(7001, STAT_GAMES_VISITED, 5)

        # Then
        assert [a.slug for a in unlocked] == ["first_verse", "in_rhythm"]
        assert unlocked[1].coin_reward == 15

    def test_unlock_happens_once(self, service, make_profile):
        make_profile(7001)
        with unit_of_work(service.db):
            service.evaluate(7001, STAT_BINGO_COLLECTED, 1)

        with unit_of_work(service.db):
            again = service.evaluate(7001, STAT_BINGO_COLLECTED, 1)

        assert again == []

    def test_below_threshold(self, service, make_profile):
        make_profile(7001)
        assert service.evaluate(7001, STAT_BINGO_COLLECTED, 0) == []


class TestClaim:
    """업적 코인 수령 테스트"""

    def test_claim_once(self, service, make_profile, make_stats):
        # Given
        make_profile(7001, balance=3)
        make_stats(7001, games_visited=5)
        with unit_of_work(service.db):
            service.evaluate(7001, STAT_GAMES_VISITED, 5)

        # When
        result = service.claim(7001, "in_rhythm")

        # Then
        assert result.coins_added == 15
        assert result.new_balance == 18
        with pytest.raises(AlreadyClaimedError) as exc_info:
            service.claim(7001, "in_rhythm")
        assert exc_info.value.status_code == 409
        assert service.ledger_repo.get_balance(7001) == 18

    def test_claim_re_evaluates_missing_record(self, service, make_profile, make_stats):
        """카운터는 충분하지만 해금 기록이 없으면 수령 시 해금한다"""
        make_profile(7001)
        make_stats(7001, bingo_collected=3)

        result = service.claim(7001, "lucky_number")

        assert result.coins_added == 25
        assert service.achievement_repo.get(7001, "lucky_number").reward_claimed_at is not None

    def test_not_unlocked(self, service, make_profile, make_stats):
        make_profile(7001)
        make_stats(7001, games_visited=2)

        with pytest.raises(NotUnlockedError):
            service.claim(7001, "in_rhythm")

    def test_achievement_without_reward(self, service, make_profile):
        make_profile(7001)
        with pytest.raises(NoRewardAvailableError):
            service.claim(7001, "first_verse")

    def test_unknown_slug(self, service, make_profile):
        make_profile(7001)
        with pytest.raises(NotFoundError):
            service.claim(7001, "nope")


class TestVisitMilestone:
    """방문 마일스톤 테스트"""

    def test_progress_formula(self):
        assert visit_reward_progress(12, 0, 5) == 12
        assert visit_reward_progress(12, 2, 5) == 2

    def test_overshoot_carries_over(self, service, make_profile, make_stats):
        """12회 방문이면 두 번 수령하고 진행도 2 가 남는다"""
        # Given
        make_profile(7001)
        make_stats(7001, games_visited=12)
        listing = service.list_achievements(7001)
        assert listing.visit_reward_pending is True
        assert listing.visit_reward_progress == 5

        # When
        first = service.claim_visit_reward(7001)
        second = service.claim_visit_reward(7001)

        # Then
        assert first.coins_added == 5
        assert second.new_balance == 10
        listing = service.list_achievements(7001)
        assert listing.visit_reward_pending is False
        assert listing.visit_reward_progress == 2
        with pytest.raises(NoRewardAvailableError) as exc_info:
            service.claim_visit_reward(7001)
        assert exc_info.value.details == {"progress": 2, "required": 5}

    def test_ref_ids_are_distinct(self, service, make_profile, make_stats):
        make_profile(7001)
        make_stats(7001, games_visited=10)

        service.claim_visit_reward(7001)
        service.claim_visit_reward(7001)

        assert service.ledger_repo.ref_exists("visit_milestone:7001:1")
        assert service.ledger_repo.ref_exists("visit_milestone:7001:2")

    def test_no_stats_row(self, service, make_profile):
        make_profile(7001)

        listing = service.list_achievements(7001)

        assert listing.visit_reward_progress == 0
        assert all(not a.unlocked for a in listing.achievements)
