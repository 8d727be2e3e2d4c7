import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from common.config import ConfigError
from synth import tables
from synth.rng import SeededRandom

UUID_TEMPLATE = "xxxxxxxx-xxxx-4xxx-yxxx-xxxxxxxxxxxx"
HEX = "0123456789abcdef"


def make_uuid(rng: SeededRandom) -> str:
    """v4-shaped UUID drawn from rng (version nibble 4, variant 8/9/a/b)."""
    out = []
    for c in UUID_TEMPLATE:
        if c == "x":
            out.append(HEX[int(rng.random() * 16)])
        elif c == "y":
            out.append(HEX[(int(rng.random() * 16) & 0x3) | 0x8])
        else:
            out.append(c)
    return "".join(out)


def build_client_pool(rng: SeededRandom, size: int) -> Tuple[str, ...]:
    return tuple(make_uuid(rng) for _ in range(size))


def format_local_datetime(ts: float) -> str:
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M:%S")


def device_type_for(os_name: str) -> str:
    return "mobile" if os_name in tables.MOBILE_OS else "desktop"


def _by_os(table: Dict[str, Any], os_name: str) -> Any:
    return table.get(os_name, table[tables.FALLBACK_OS])


class EventSchema:
    """
    Strategy that turns rng draws into one event payload.
    Subclasses implement synthesize(); the client pool is read-only.
    """
    name = "base"
    default_reuse_probability = 0.0

    def __init__(self, client_pool: Sequence[str] = (),
                 reuse_probability: Optional[float] = None,
                 clock: Callable[[], float] = time.time):
        self.client_pool = tuple(client_pool)
        if reuse_probability is None:
            reuse_probability = self.default_reuse_probability
        self.reuse_probability = reuse_probability if self.client_pool else 0.0
        self.clock = clock

    def pick_client_id(self, rng: SeededRandom) -> str:
        if self.reuse_probability > 0 and rng.random() < self.reuse_probability:
            return rng.random_choice(self.client_pool)
        return make_uuid(rng)

    def session_id(self, client_id: str, now: float) -> str:
        return f"sess_{int(now * 1000)}_{client_id[:6]}"

    def synthesize(self, rng: SeededRandom) -> Dict[str, Any]:
        raise NotImplementedError


class ShoppingMallSchema(EventSchema):
    name = "shopping_mall"
    default_reuse_probability = 0.7

    def synthesize(self, rng: SeededRandom) -> Dict[str, Any]:
        now = self.clock()
        os_name = rng.random_choice(tables.OS_LIST)
        gender = rng.random_choice(tables.GENDERS)
        event_name = rng.random_choice(tables.SHOP_EVENT_NAMES)
        client_id = self.pick_client_id(rng)
        page_path = rng.random_choice(tables.PAGE_PATHS)
        source = rng.random_choice(tables.TRAFFIC_SOURCES)
        campaign = rng.random_choice(tables.UTM_CAMPAIGNS)

        device_type = device_type_for(os_name)
        medium = tables.TRAFFIC_MEDIUMS.get(source, tables.DEFAULT_MEDIUM)
        user_agent = _by_os(tables.USER_AGENTS, os_name)

        properties = {
            "page_path": page_path,
            "page_title": tables.PAGE_TITLES.get(page_path, tables.SHOP_NAME),
            "referrer": tables.REFERRERS.get(source, ""),
        }
        properties.update(self._event_properties(rng, event_name, user_agent, now))

        return {
            "event_name": event_name,
            "timestamp": format_local_datetime(now),
            "client_id": client_id,
            "user_id": rng.random_int(1, 10000),
            "session_id": self.session_id(client_id, now),
            "device_type": device_type,
            "traffic_medium": medium,
            "traffic_source": source,
            "properties": properties,
            "context": {
                "geo": {
                    "country": "KR",
                    "city": rng.random_choice(tables.CITIES),
                    "timezone": "Asia/Seoul",
                },
                "device": {
                    "device_type": device_type,
                    "os": os_name,
                    "browser": rng.random_choice(tables.BROWSERS),
                    "language": "ko-KR",
                    "timezone": "Asia/Seoul",
                },
                "traffic_source": {
                    "medium": medium,
                    "source": source,
                    "campaign": campaign,
                },
                "user_agent": user_agent,
                "screen_resolution": rng.random_choice(_by_os(tables.SCREEN_RESOLUTIONS, os_name)),
                "viewport_size": rng.random_choice(_by_os(tables.VIEWPORT_SIZES, os_name)),
                "utm_params": {
                    "utm_source": source,
                    "utm_medium": medium,
                    "utm_campaign": campaign,
                    "utm_content": rng.random_choice(tables.UTM_CONTENTS),
                },
            },
            "user_gender": gender,
            "user_age": rng.random_int(18, 65),
        }

    def _event_properties(self, rng: SeededRandom, event_name: str,
                          user_agent: str, now: float) -> Dict[str, Any]:
        if event_name == "page_view":
            return {
                "page_load_time": rng.random_int(500, 3000),
                "user_agent": user_agent,
            }
        if event_name == "button_click":
            return {
                "button_text": rng.random_choice(tables.BUTTON_LABELS),
                "button_id": f"btn_{rng.random_int(1, 100)}",
                "click_position": {
                    "x": rng.random_int(0, 1200),
                    "y": rng.random_int(0, 800),
                },
            }
        if event_name == "add_to_cart":
            return {
                "product_id": rng.random_int(1, 1000),
                "product_name": rng.random_choice(tables.PRODUCT_NAMES),
                "product_category": rng.random_choice(tables.PRODUCT_CATEGORIES),
                "product_price": rng.random_int(10000, 500000),
                "quantity": rng.random_int(1, 5),
                "cart_total": rng.random_int(50000, 1000000),
            }
        if event_name == "purchase":
            return {
                "order_id": f"ORD_{int(now * 1000)}_{rng.random_int(1000, 9999)}",
                "total_amount": rng.random_int(50000, 500000),
                "payment_method": rng.random_choice(tables.PAYMENT_METHODS),
                "shipping_address": rng.random_choice(tables.SHIPPING_ADDRESSES),
                "coupon_used": rng.random() > 0.7,
                "discount_amount": rng.random_int(0, 50000),
            }
        if event_name == "wishlist_add":
            return {
                "product_id": rng.random_int(1, 1000),
                "product_name": rng.random_choice(tables.PRODUCT_NAMES),
                "product_price": rng.random_int(10000, 500000),
                "wishlist_count": rng.random_int(1, 20),
            }
        return {}


class AutoClickSchema(EventSchema):
    """Single generic auto_click event with a static context."""
    name = "auto_click"

    def synthesize(self, rng: SeededRandom) -> Dict[str, Any]:
        now = self.clock()
        os_name = rng.random_choice(tables.OS_LIST)
        gender = rng.random_choice(tables.GENDERS)
        client_id = self.pick_client_id(rng)
        device_type = device_type_for(os_name)
        return {
            "event_name": rng.random_choice(tables.AUTO_CLICK_EVENT_NAMES),
            "timestamp": format_local_datetime(now),
            "client_id": client_id,
            "user_id": rng.random_int(0, 99999),
            "session_id": self.session_id(client_id, now),
            "device_type": device_type,
            "traffic_medium": "direct",
            "traffic_source": "cli_simulator",
            "properties": {
                "page_path": "/cli",
                "page_title": "CLI Simulate",
                "is_button": True,
                "target_text": f"button {rng.random_int(0, 7)}",
                "referrer": "",
            },
            "context": {
                "geo": {"country": "KR", "city": "Seoul", "timezone": "Asia/Seoul"},
                "device": {
                    "device_type": device_type,
                    "os": os_name,
                    "browser": "Chrome",
                    "language": "ko-KR",
                    "timezone": "Asia/Seoul",
                },
                "traffic_source": {"medium": "cli", "source": "simulated", "campaign": None},
                "user_agent": "Simulator/CLI",
                "screen_resolution": "1920x1080",
                "viewport_size": "1200x800",
                "utm_params": {},
            },
            "user_gender": gender,
            "user_age": rng.random_int(10, 49),
        }


SCHEMAS = {
    ShoppingMallSchema.name: ShoppingMallSchema,
    AutoClickSchema.name: AutoClickSchema,
}


def get_schema(name: str, rng: SeededRandom, pool_size: int = 1000,
               reuse_probability: Optional[float] = None,
               clock: Callable[[], float] = time.time) -> EventSchema:
    """Resolve a schema by name and build its client pool from rng."""
    try:
        cls = SCHEMAS[name]
    except KeyError:
        raise ConfigError(f"Unknown event schema '{name}' (choose from {sorted(SCHEMAS)})") from None
    if reuse_probability is None:
        reuse_probability = cls.default_reuse_probability
    pool = build_client_pool(rng, pool_size) if reuse_probability > 0 else ()
    return cls(pool, reuse_probability=reuse_probability, clock=clock)
