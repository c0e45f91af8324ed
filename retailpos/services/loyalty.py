# retailpos/services/loyalty.py
from dataclasses import replace

from ..model import Customer, Discount, LoyaltyReward, LoyaltySettings
from ..utils.money import D, Money


def _exempt(customer: Customer | None) -> bool:
    return customer is None or customer.is_walk_in


def evaluate_loyalty_eligibility(
    customer: Customer | None,
    settings: LoyaltySettings,
    *,
    already_rewarded: bool = False,
) -> bool:
    """True when the customer may redeem the loyalty reward on the current order.

    `already_rewarded` is set when the reward is already on the order.
    """
    if _exempt(customer) or not settings.enabled or already_rewarded:
        return False
    return D(customer.total_spent) >= D(settings.spend_threshold)


def apply_loyalty_reward(current: Discount, settings: LoyaltySettings) -> Discount:
    # one discount slot: whatever is already there wins
    if current is not None:
        return current
    return LoyaltyReward(percentage=D(settings.reward_percentage))


def settle_loyalty(
    customer: Customer | None,
    total: Money,
    loyalty_discount_applied: bool,
    settings: LoyaltySettings,
) -> Customer | None:
    """Loyalty fields after a sale.

    Redeeming the reward restarts progress from zero; the spend of the
    redeeming order does not count toward the next cycle.
    """
    if _exempt(customer):
        return customer
    if loyalty_discount_applied:
        return replace(customer, total_spent=D(0), reward_available=False)

    spent = D(customer.total_spent) + D(total)
    reward = customer.reward_available
    if settings.enabled and not reward and spent >= D(settings.spend_threshold):
        reward = True
    return replace(customer, total_spent=spent, reward_available=reward)


def loyalty_progress(customer: Customer, settings: LoyaltySettings) -> dict:
    spent = D(customer.total_spent)
    threshold = D(settings.spend_threshold)
    if customer.reward_available:
        percent = D(100)
    elif settings.enabled and threshold > 0:
        percent = min(spent / threshold * 100, D(100))
    else:
        percent = D(0)
    remaining = max(D(0), threshold - spent) if settings.enabled else D(0)
    return {
        "enabled": settings.enabled,
        "progress_percent": float(round(percent, 2)),
        "amount_to_next_reward": float(round(remaining, 2)),
        "reward_percentage": float(settings.reward_percentage),
    }
