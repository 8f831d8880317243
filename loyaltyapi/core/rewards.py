"""
보상 설정 (정적 데이터)

빙고 슬롯 보상, 카탈로그 가격 오버라이드, 구매 횟수 마일스톤 보상을 한곳에 둔다.
카탈로그 가격은 이 오버라이드가 있으면 우선하고, 없으면 DB 가격을 쓴다.
"""

from typing import Dict, List, Optional

BINGO_SLOT_LABELS: Dict[str, str] = {
    "horizontal": "Horizontal",
    "vertical": "Vertical",
    "diagonal": "Diagonal",
    "full_card": "Full card",
}

BINGO_REWARDS: Dict[str, Dict[str, int]] = {
    "personal": {
        "horizontal": 75,
        "vertical": 75,
        "diagonal": 75,
        "full_card": 100,
    },
    "team": {
        "horizontal": 150,
        "vertical": 150,
        "full_card": 150,
    },
}

PERSONAL_BINGO_SLOTS = 4
TEAM_BINGO_SLOTS = 3

# 상품 id -> 가격. 목록/구매/코드 교환 모두 같은 값을 봐야 한다.
CATALOG_PRICE_OVERRIDES: Dict[str, int] = {
    "extra_card": 25,
    "free_ticket": 100,
}

# 누적 구매 횟수 -> 보너스 코인. 각 임계값은 user_stats 의 개별 마커로 한 번만 지급된다.
PURCHASE_MILESTONE_REWARDS: Dict[int, int] = {
    1: 10,
    3: 25,
    5: 50,
}


def bingo_reward_type(slot_type: str, slug: str) -> str:
    return f"{slot_type}_bingo_{slug}"


def bingo_reward_types() -> Dict[str, int]:
    """`personal_bingo_horizontal` 같은 보상 타입 -> 코인"""
    result: Dict[str, int] = {}
    for slot_type, slots in BINGO_REWARDS.items():
        for slug, coins in slots.items():
            result[bingo_reward_type(slot_type, slug)] = coins
    return result


def bingo_config() -> Dict[str, List[Dict]]:
    config: Dict[str, List[Dict]] = {}
    for slot_type, slots in BINGO_REWARDS.items():
        config[slot_type] = [
            {
                "slug": slug,
                "reward_type": bingo_reward_type(slot_type, slug),
                "label": BINGO_SLOT_LABELS[slug],
                "coins": coins,
            }
            for slug, coins in slots.items()
        ]
    return config


def get_catalog_item_price(item_id: str, db_price: Optional[int]) -> int:
    override = CATALOG_PRICE_OVERRIDES.get(item_id)
    if override is not None:
        return override
    return int(db_price or 0)
