"""Measurement Protocol parameter tables and hit parameter helpers."""

import logging
import re
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

# Readable parameter names accepted from callers, mapped to their wire names.
# Every wire name appears once so translation never merges two keys.
PARAMETERS_MAP: dict[str, str] = {
    # General
    "protocol_version": "v",
    "tracking_id": "tid",
    "anonymize_ip": "aip",
    "data_source": "ds",
    "queue_time": "qt",
    "cache_buster": "z",
    # User
    "client_id": "cid",
    "user_id": "uid",
    # Session
    "session_control": "sc",
    "ip_override": "uip",
    "user_agent_override": "ua",
    "geographical_override": "geoid",
    # Traffic sources
    "document_referrer": "dr",
    "campaign_name": "cn",
    "campaign_source": "cs",
    "campaign_medium": "cm",
    "campaign_keyword": "ck",
    "campaign_content": "cc",
    "campaign_id": "ci",
    "google_ads_id": "gclid",
    "google_display_ads_id": "dclid",
    # System info
    "screen_resolution": "sr",
    "viewport_size": "vp",
    "document_encoding": "de",
    "screen_colors": "sd",
    "user_language": "ul",
    "java_enabled": "je",
    "flash_version": "fl",
    # Hit
    "hit_type": "t",
    "non_interaction_hit": "ni",
    # Content information
    "document_location_url": "dl",
    "document_host_name": "dh",
    "document_path": "dp",
    "document_title": "dt",
    "screen_name": "cd",
    "link_id": "linkid",
    # App tracking
    "application_name": "an",
    "application_id": "aid",
    "application_version": "av",
    "application_installer_id": "aiid",
    # Event tracking
    "event_category": "ec",
    "event_action": "ea",
    "event_label": "el",
    "event_value": "ev",
    "event_page": "p",
    # E-commerce
    "transaction_id": "ti",
    "transaction_affiliation": "ta",
    "transaction_revenue": "tr",
    "transaction_shipping": "ts",
    "transaction_tax": "tt",
    "item_name": "in",
    "item_price": "ip",
    "item_quantity": "iq",
    "item_code": "ic",
    "item_category": "iv",
    "currency_code": "cu",
    # Enhanced e-commerce
    "product_action": "pa",
    "product_action_list": "pal",
    "checkout_step": "cos",
    "checkout_step_option": "col",
    "coupon_code": "tcc",
    "promotion_action": "promoa",
    # Social interactions
    "social_network": "sn",
    "social_action": "sa",
    "social_action_target": "st",
    # Timing
    "user_timing_category": "utc",
    "user_timing_variable_name": "utv",
    "user_timing_time": "utt",
    "user_timing_label": "utl",
    "page_load_time": "plt",
    "dns_time": "dns",
    "page_download_time": "pdt",
    "redirect_response_time": "rrt",
    "tcp_connect_time": "tcp",
    "server_response_time": "srt",
    "dom_interactive_time": "dit",
    "content_load_time": "clt",
    # Exceptions
    "exception_description": "exd",
    "is_exception_fatal": "exf",
    # Content experiments
    "experiment_id": "xid",
    "experiment_variant": "xvar",
}

ACCEPTED_PARAMETERS: frozenset[str] = frozenset(PARAMETERS_MAP.values())

# Indexed parameters (custom dimensions/metrics, product and impression data, ...)
ACCEPTED_PARAMETERS_REGEX: tuple[re.Pattern, ...] = (
    re.compile(r"^cm[0-9]+$"),
    re.compile(r"^cd[0-9]+$"),
    re.compile(r"^cg(10|[0-9])$"),
    re.compile(r"^pr[0-9]{1,3}(id|nm|br|ca|va|pr|qt|cc|ps)$"),
    re.compile(r"^pr[0-9]{1,3}(cd|cm)[0-9]{1,3}$"),
    re.compile(r"^il[0-9]{1,3}nm$"),
    re.compile(r"^il[0-9]{1,3}pi[0-9]{1,3}(id|nm|br|ca|va|ps|pr)$"),
    re.compile(r"^il[0-9]{1,3}pi[0-9]{1,3}(cd|cm)[0-9]{1,3}$"),
    re.compile(r"^promo[0-9]{1,3}(id|nm|cr|ps)$"),
)


def translate_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """
    Rename readable parameter names to their wire names.

    Keys missing from PARAMETERS_MAP are kept as they are, so wire names can
    be passed directly.
    """
    translated: dict[str, Any] = {}
    for key, value in params.items():
        translated[PARAMETERS_MAP.get(key, key)] = value
    return translated


def tidy_parameters(params: Mapping[str, Optional[Any]]) -> dict[str, Any]:
    """Return a copy of params without the keys whose value is None."""
    return {key: value for key, value in params.items() if value is not None}


def format_value(value: Any) -> str:
    """Render a parameter value the way the collector expects it."""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def is_accepted_parameter(key: str) -> bool:
    if key in ACCEPTED_PARAMETERS:
        return True
    return any(pattern.match(key) for pattern in ACCEPTED_PARAMETERS_REGEX)


def check_parameters(params: Mapping[str, Any]) -> list[str]:
    """
    Warn about parameters the collector does not know.

    Purely diagnostic: the hit is neither changed nor rejected.

    Returns:
        The unsupported keys, in hit order
    """
    unsupported = []
    for key, value in params.items():
        if is_accepted_parameter(key):
            continue
        logger.warning("Warning! Unsupported tracking parameter %s (%s)", key, value)
        unsupported.append(key)
    return unsupported
