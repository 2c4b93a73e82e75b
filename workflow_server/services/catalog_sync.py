"""
Catalog Sync Service for the workflow server
Mirrors payments-provider products, prices and subscriptions into the backend
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from dateutil.relativedelta import relativedelta
from supabase import Client

from ..core.logging import get_catalog_logger, log_execution_time
from ..models.catalog import PriceRecord, ProductRecord, SubscriptionRecord

logger = get_catalog_logger()

PRODUCT_EVENTS = {"product.created", "product.updated"}
PRICE_EVENTS = {"price.created", "price.updated"}
SUBSCRIPTION_EVENTS = {
    "customer.subscription.created",
    "customer.subscription.updated",
    "customer.subscription.deleted",
}

_INTERVAL_STEPS = {
    "day": lambda n: relativedelta(days=n),
    "week": lambda n: relativedelta(weeks=n),
    "month": lambda n: relativedelta(months=n),
    "year": lambda n: relativedelta(years=n),
}


def to_iso_datetime(seconds: Optional[Union[int, float]]) -> Optional[str]:
    """Convert epoch seconds to an ISO-8601 UTC string; falsy input gives None"""
    if not seconds:
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc).isoformat()
    except (TypeError, ValueError, OverflowError, OSError) as e:
        logger.error(f"❌ Failed to convert timestamp {seconds!r}: {e}")
        return None


def next_billing_date(anchor: int, interval: str = "month", interval_count: int = 1) -> int:
    """Epoch seconds one billing period after the anchor"""
    start = datetime.fromtimestamp(anchor, tz=timezone.utc)
    step = _INTERVAL_STEPS.get(interval)
    if step is None:
        return anchor
    return int((start + step(interval_count)).timestamp())


def _object_id(value: Union[str, Dict[str, Any]]) -> str:
    return value if isinstance(value, str) else value["id"]


class CatalogSyncService:
    """Writes provider catalog objects through the privileged client"""

    def __init__(self, client: Client):
        self.client = client

    def upsert_product_record(self, product: Dict[str, Any]) -> ProductRecord:
        images = product.get("images") or []
        record = ProductRecord(
            id=product["id"],
            active=product["active"],
            name=product["name"],
            description=product.get("description"),
            image=images[0] if images else None,
            metadata=product.get("metadata") or {},
        )
        self.client.table("products").upsert([record.model_dump(mode="json")]).execute()
        logger.info(f"Product synced: {record.id}")
        return record

    def upsert_price_record(self, price: Dict[str, Any]) -> PriceRecord:
        recurring = price.get("recurring") or {}
        record = PriceRecord(
            id=price["id"],
            product_id=_object_id(price["product"]),
            active=price["active"],
            currency=price["currency"],
            description=price.get("nickname"),
            type=price["type"],
            unit_amount=price.get("unit_amount"),
            interval=recurring.get("interval"),
            interval_count=recurring.get("interval_count"),
            trial_period_days=recurring.get("trial_period_days"),
            metadata=price.get("metadata") or {},
        )
        self.client.table("prices").upsert([record.model_dump(mode="json")]).execute()
        logger.info(f"Price synced: {record.id} ({record.product_id})")
        return record

    def lookup_user_id(self, customer_id: str) -> str:
        """Map a provider customer id to the backend user id"""
        try:
            result = (
                self.client.table("customers")
                .select("id")
                .eq("stripe_customer_id", customer_id)
                .single()
                .execute()
            )
        except Exception as e:
            logger.error(f"❌ Customer lookup failed for {customer_id}: {e}")
            raise
        return result.data["id"]

    def copy_billing_details_to_customer(self, user_id: str, payment_method: Dict[str, Any]) -> None:
        """Store the payment method's billing details on the user row"""
        billing = payment_method.get("billing_details") or {}
        address = billing.get("address")
        method_type = payment_method.get("type")
        try:
            self.client.table("users").update({
                "billing_address": dict(address) if address else None,
                "payment_method": dict(payment_method.get(method_type) or {}),
            }).eq("id", user_id).execute()
        except Exception as e:
            # The subscription row is already written; billing details are secondary
            logger.warning(f"⚠️ Failed to update user billing details: {e}")

    def _ensure_price_and_product(self, price: Dict[str, Any]) -> None:
        product = price.get("product")
        try:
            if isinstance(product, dict):
                self.upsert_product_record(product)
            elif product:
                logger.debug(f"Product {product} not expanded on subscription; skipping product upsert")
            self.upsert_price_record(price)
        except Exception as e:
            logger.error(f"❌ Failed to ensure price/product records: {e}")

    def manage_subscription_status_change(
        self,
        subscription: Dict[str, Any],
        customer_id: str,
        create_action: bool = False,
    ) -> SubscriptionRecord:
        """
        Upsert the subscription row for a provider subscription object.

        The current period runs from ``billing_cycle_anchor`` to one billing
        interval later. Price and product rows are refreshed best-effort first.
        """
        user_id = self.lookup_user_id(customer_id)

        item = subscription["items"]["data"][0]
        price = item["price"]
        recurring = price.get("recurring") or {}

        period_start = subscription.get("billing_cycle_anchor")
        period_end = None
        if period_start:
            period_end = next_billing_date(
                period_start,
                recurring.get("interval") or "month",
                recurring.get("interval_count") or 1,
            )

        self._ensure_price_and_product(price)

        record = SubscriptionRecord(
            id=subscription["id"],
            user_id=user_id,
            metadata=subscription.get("metadata") or {},
            status=subscription["status"],
            price_id=price["id"],
            quantity=item.get("quantity"),
            cancel_at_period_end=bool(subscription.get("cancel_at_period_end")),
            cancel_at=to_iso_datetime(subscription.get("cancel_at")),
            canceled_at=to_iso_datetime(subscription.get("canceled_at")),
            current_period_start=to_iso_datetime(period_start),
            current_period_end=to_iso_datetime(period_end),
            ended_at=to_iso_datetime(subscription.get("ended_at")),
            trial_start=to_iso_datetime(subscription.get("trial_start")),
            trial_end=to_iso_datetime(subscription.get("trial_end")),
        )

        try:
            self.client.table("subscriptions").upsert([record.model_dump(mode="json")]).execute()
        except Exception as e:
            logger.error(f"❌ Subscription upsert failed: {e}")
            raise
        logger.info(f"Subscription synced: {record.id} [{record.status}] for user {user_id}")

        payment_method = subscription.get("default_payment_method")
        if create_action and isinstance(payment_method, dict) and user_id:
            self.copy_billing_details_to_customer(user_id, payment_method)

        return record

    @log_execution_time(logger)
    def handle_event(self, event: Dict[str, Any]) -> bool:
        """Apply one provider event; returns False for event types that are ignored"""
        event_type = event.get("type", "")
        obj = (event.get("data") or {}).get("object") or {}

        if event_type in PRODUCT_EVENTS:
            self.upsert_product_record(obj)
        elif event_type in PRICE_EVENTS:
            self.upsert_price_record(obj)
        elif event_type in SUBSCRIPTION_EVENTS:
            self.manage_subscription_status_change(
                obj,
                _object_id(obj["customer"]),
                create_action=event_type == "customer.subscription.created",
            )
        else:
            logger.debug(f"Ignoring event type {event_type!r}")
            return False
        return True
