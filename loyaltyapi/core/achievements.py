"""
업적 정의 (정적 데이터)

stat_key 는 user_stats 의 카운터 컬럼, threshold 는 해금에 필요한 최소값이다.
coin_reward 가 있는 업적만 /achievements/claim 으로 코인을 받을 수 있다.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

STAT_GAMES_VISITED = "games_visited"
STAT_TICKETS_PURCHASED = "tickets_purchased"
STAT_BINGO_COLLECTED = "bingo_collected"

STAT_KEYS = (STAT_GAMES_VISITED, STAT_TICKETS_PURCHASED, STAT_BINGO_COLLECTED)


@dataclass(frozen=True)
class AchievementDefinition:
    slug: str
    badge: str
    name: str
    description: str
    label: str
    stat_key: str
    threshold: int
    coin_reward: Optional[int] = None


ACHIEVEMENTS: List[AchievementDefinition] = [
    # 방문 횟수
    AchievementDefinition(
        slug="first_verse",
        badge="🥉",
        name="First Verse",
        description="Attend 1 event",
        label="You stepped up to the mic. It all starts here.",
        stat_key=STAT_GAMES_VISITED,
        threshold=1,
    ),
    AchievementDefinition(
        slug="in_rhythm",
        badge="🥈",
        name="In Rhythm",
        description="Attend 5 events",
        label="No more glancing at the screen, you catch the beat.",
        stat_key=STAT_GAMES_VISITED,
        threshold=5,
        coin_reward=15,
    ),
    AchievementDefinition(
        slug="chorus_going",
        badge="🥇",
        name="Chorus Going",
        description="Attend 10 events",
        label="Now they can hear you. And sing along.",
        stat_key=STAT_GAMES_VISITED,
        threshold=10,
    ),
    AchievementDefinition(
        slug="bridge",
        badge="⭐",
        name="Bridge",
        description="Attend 25 events",
        label="The style is there and the voice is recognized.",
        stat_key=STAT_GAMES_VISITED,
        threshold=25,
        coin_reward=50,
    ),
    AchievementDefinition(
        slug="final_chorus",
        badge="🔥",
        name="Final Chorus",
        description="Attend 50 events",
        label="The room is rocking. You are part of the legend.",
        stat_key=STAT_GAMES_VISITED,
        threshold=50,
    ),
    AchievementDefinition(
        slug="karaoke_legend",
        badge="👑",
        name="Karaoke Legend",
        description="Attend 100 events",
        label="Your voice is part of the story.",
        stat_key=STAT_GAMES_VISITED,
        threshold=100,
        coin_reward=100,
    ),
    # 티켓 구매 횟수
    AchievementDefinition(
        slug="has_ticket",
        badge="🥉",
        name="Got a Ticket",
        description="Buy 1 ticket",
        label="Decided. It is going to be loud.",
        stat_key=STAT_TICKETS_PURCHASED,
        threshold=1,
    ),
    AchievementDefinition(
        slug="buying_for_friends",
        badge="🥈",
        name="Buying for Friends",
        description="Buy 5 tickets",
        label="When one microphone is not enough.",
        stat_key=STAT_TICKETS_PURCHASED,
        threshold=5,
        coin_reward=50,
    ),
    AchievementDefinition(
        slug="karaoke_magnate",
        badge="🥇",
        name="Karaoke Magnate",
        description="Buy 10 tickets",
        label="You do not just play, you start the party.",
        stat_key=STAT_TICKETS_PURCHASED,
        threshold=10,
    ),
    # 빙고 승리 횟수
    AchievementDefinition(
        slug="first_bingo",
        badge="🥉",
        name="First Bingo",
        description="Collect your first bingo",
        label="Caught some luck. And the mic too.",
        stat_key=STAT_BINGO_COLLECTED,
        threshold=1,
    ),
    AchievementDefinition(
        slug="lucky_number",
        badge="🥈",
        name="Lucky Number",
        description="Collect bingo 3 times",
        label="Looks like it is not a coincidence anymore.",
        stat_key=STAT_BINGO_COLLECTED,
        threshold=3,
        coin_reward=25,
    ),
    AchievementDefinition(
        slug="bingo_sense",
        badge="🥇",
        name="Bingo Sense",
        description="Collect bingo 5 times",
        label="You are starting to feel the game.",
        stat_key=STAT_BINGO_COLLECTED,
        threshold=5,
    ),
    AchievementDefinition(
        slug="bingo_master",
        badge="⭐",
        name="Bingo Master",
        description="Collect bingo 10 times",
        label="When luck listens to you.",
        stat_key=STAT_BINGO_COLLECTED,
        threshold=10,
        coin_reward=50,
    ),
    AchievementDefinition(
        slug="bingo_legend",
        badge="👑",
        name="Bingo Legend",
        description="Collect bingo 25 times",
        label="They fear you. They applaud you.",
        stat_key=STAT_BINGO_COLLECTED,
        threshold=25,
    ),
]

ACHIEVEMENTS_BY_SLUG: Dict[str, AchievementDefinition] = {a.slug: a for a in ACHIEVEMENTS}


def get_achievement(slug: str) -> Optional[AchievementDefinition]:
    return ACHIEVEMENTS_BY_SLUG.get(slug)


def achievements_for_stat(stat_key: str) -> List[AchievementDefinition]:
    return [a for a in ACHIEVEMENTS if a.stat_key == stat_key]
