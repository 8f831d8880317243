"""
코드가 부여하는 대상 (태그드 유니온)

codes 행의 네임스페이스와 nullable 외래키 조합을 그대로 다루지 않고,
Registration / Purchase / Prize 중 하나로 변환해 리뎀션 엔진이 분기하도록 한다.
"""

from dataclasses import dataclass
from typing import Union

from loyaltyapi.models.code import CodeNamespace
from loyaltyapi.schemas.codes import CodeSchema


@dataclass(frozen=True)
class RegistrationTarget:
    event_id: str


@dataclass(frozen=True)
class PurchaseTarget:
    catalog_item_id: str


@dataclass(frozen=True)
class PrizeTarget:
    coins_amount: int


CodeTarget = Union[RegistrationTarget, PurchaseTarget, PrizeTarget]


def target_of(code: CodeSchema, default_prize_coins: int) -> CodeTarget:
    """codes 행에서 대상을 추출한다. 필수 참조가 비어 있으면 ValueError."""
    if code.namespace == CodeNamespace.REGISTRATION:
        if not code.event_id:
            raise ValueError(f"Registration code {code.value} has no event")
        return RegistrationTarget(event_id=code.event_id)
    if code.namespace == CodeNamespace.PURCHASE:
        if not code.catalog_item_id:
            raise ValueError(f"Purchase code {code.value} has no catalog item")
        return PurchaseTarget(catalog_item_id=code.catalog_item_id)
    if code.namespace == CodeNamespace.PRIZE:
        coins = code.coins_amount if code.coins_amount is not None else default_prize_coins
        return PrizeTarget(coins_amount=coins)
    raise ValueError(f"Unknown code namespace: {code.namespace}")
