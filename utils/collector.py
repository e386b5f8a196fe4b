"""
Site data collector: turns a wizard session snapshot into the canonical
site-config document.

Everything here is a pure function of the snapshot passed in (see
utils/snapshot.py for how snapshots are obtained), apart from
download_as_json (writes a file) and send_to_backend (one HTTP POST).

Older wizard pages stored list content under indexed keys
(product1Name, member2Role, product3Image, ...). Those are folded into
arrays by the LegacyFold tables below; a normalized document never carries
both forms.
"""
import copy
import json
import math
import os
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx

from core.config import logger, DOCUMENT_VERSION, DOCUMENT_SOURCE, DOCUMENT_ENV


@dataclass(frozen=True)
class LegacyFold:
    """Maps `{prefix}{i}{suffix}` keys, i in 1..max_index, onto the array `target`.

    `fields` pairs an output field with its key suffix. A fold with
    `scalar=True` has a single field and emits the bare value instead of a
    dict. `placeholder` fills a missing "name" ("Product {i}").
    """
    target: str
    prefix: str
    fields: Tuple[Tuple[str, str], ...]
    max_index: int
    placeholder: Optional[str] = None
    scalar: bool = False

    def key(self, i: int, suffix: str) -> str:
        return f"{self.prefix}{i}{suffix}"

    def legacy_keys(self) -> List[str]:
        return [self.key(i, suffix) for i in range(1, self.max_index + 1) for _, suffix in self.fields]

    def collect(self, raw: Mapping[str, Any]) -> List[Any]:
        items: List[Any] = []
        for i in range(1, self.max_index + 1):
            values = {field: raw.get(self.key(i, suffix)) for field, suffix in self.fields}
            if not any(values.values()):
                continue
            if self.scalar:
                items.append(next(iter(values.values())))
                continue
            item = {field: (value or "") for field, value in values.items()}
            if self.placeholder and not values.get("name"):
                item["name"] = self.placeholder.format(i=i)
            items.append(item)
        return items


CONTENT_FOLDS = (
    LegacyFold("products", "product", (("name", "Name"), ("description", "Desc"), ("price", "Price")), 10, "Product {i}"),
    LegacyFold("team", "member", (("name", "Name"), ("role", "Role")), 10, "Member {i}"),
)

IMAGE_FOLDS = (
    LegacyFold("productImages", "product", (("image", "Image"),), 15, scalar=True),
    LegacyFold("teamAvatars", "member", (("avatar", "Avatar"),), 15, scalar=True),
)


def fold_legacy_keys(raw: Any, folds) -> Dict[str, Any]:
    """Fold indexed keys into arrays. An array already present wins; legacy keys are always dropped."""
    out: Dict[str, Any] = dict(raw) if isinstance(raw, Mapping) else {}
    for fold in folds:
        existing = out.get(fold.target)
        items = list(existing) if isinstance(existing, list) else fold.collect(out)
        for key in fold.legacy_keys():
            out.pop(key, None)
        out[fold.target] = items
    return out


def normalize_content(raw_content: Any) -> Dict[str, Any]:
    return fold_legacy_keys(raw_content, CONTENT_FOLDS)


def normalize_images(raw_images: Any) -> Dict[str, Any]:
    return fold_legacy_keys(raw_images, IMAGE_FOLDS)


# ---- snapshot readers ----

def _read_str(snapshot: Mapping[str, Any], key: str) -> str:
    """String slot; numbers are stringified, anything else (objects, lists, bools) reads as absent."""
    value = snapshot.get(key)
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _read_json(snapshot: Mapping[str, Any], key: str) -> Dict[str, Any]:
    value = snapshot.get(key)
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, str) and value:
        try:
            parsed = json.loads(value)
        except ValueError:
            logger.debug(f"[collector] ignoring malformed JSON in {key}")
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


def _read_number(snapshot: Mapping[str, Any], key: str, fallback: float = 0):
    """Numeric slot; absent/empty uses `fallback`, zero or non-numeric is None."""
    value = snapshot.get(key)
    if value is None or value == "":
        value = fallback
    if isinstance(value, bool):
        value = 1 if value else 0
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    if not num or math.isnan(num) or math.isinf(num):
        return None
    return int(num) if num.is_integer() else num


def _read_flag(snapshot: Mapping[str, Any], key: str) -> bool:
    value = snapshot.get(key)
    return value is True or value == "true"


_DATA_URL_MIME = re.compile(r"^data:([^;]+);base64,")


def estimate_kb(data: str) -> int:
    """Decoded size of base64 text in KB (floor)."""
    return math.floor(len(data) * 3 / 4 / 1024)


def build_logo_meta(generated: Optional[str], uploaded: Optional[str]) -> Optional[Dict[str, Any]]:
    logo = generated or uploaded
    if not logo:
        return None
    match = _DATA_URL_MIME.match(logo)
    return {
        "type": "generated" if generated else "uploaded",
        "mime": match.group(1) if match else "image/png",
        "data": logo,
        "sizeKB": estimate_kb(logo),
    }


def _iso(now: datetime) -> str:
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def collect_all_data(snapshot: Mapping[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Build a fresh canonical document from a session snapshot."""
    snapshot = snapshot or {}
    now = now or datetime.now(timezone.utc)

    user_profile = _read_json(snapshot, "userProfile")
    palette = _read_json(snapshot, "selectedPalette")
    generated_logo = _read_str(snapshot, "generatedLogo") or None
    uploaded_logo = _read_str(snapshot, "uploadedLogo") or None
    app_name = _read_str(snapshot, "appName")
    catalog = _read_str(snapshot, "selectedCatalog") or "modern"
    product_page = _read_str(snapshot, "selectedProductPage") or "grid"
    page_content = normalize_content(_read_json(snapshot, "pageContent"))
    page_images = normalize_images(_read_json(snapshot, "pageImages"))

    logo_meta = build_logo_meta(generated_logo, uploaded_logo)
    website_name = user_profile.get("websiteName") or user_profile.get("businessName") or app_name or ""
    colors = palette.get("colors")
    colors = list(colors) if isinstance(colors, list) else []

    return {
        "meta": {
            "version": DOCUMENT_VERSION,
            "timestamp": _iso(now),
            "source": DOCUMENT_SOURCE,
            "env": DOCUMENT_ENV,
        },
        "user": {
            "name": _read_str(snapshot, "userName") or _read_str(snapshot, "username"),
            "email": _read_str(snapshot, "userEmail"),
        },
        "profile": {
            "firstName": user_profile.get("firstName") or "",
            "lastName": user_profile.get("lastName") or "",
            "websiteName": website_name,
            "phone": user_profile.get("phone") or "",
        },
        "website": {
            "appName": app_name or (user_profile.get("websiteName") or ""),
            "catalog": catalog,
            "productLayout": product_page,
        },
        "branding": {
            "palette": {
                "name": palette.get("name") or "Custom",
                "description": palette.get("description") or "",
                "colors": colors,
            },
            "logo": logo_meta,
            "settings": {
                "logoSize": _read_number(snapshot, "logoSize"),
                "logoBorderRadius": _read_number(snapshot, "logoBorderRadius"),
            },
            "viewer": {
                "zoom": _read_number(snapshot, "logoViewerZoom", fallback=1),
                "offsetX": _read_number(snapshot, "logoViewerOffsetX"),
                "offsetY": _read_number(snapshot, "logoViewerOffsetY"),
            },
        },
        "assets": {
            "content": page_content,
            "images": page_images,
        },
        "flags": {
            "adminEvaluationRequested": _read_flag(snapshot, "adminEvaluationRequested"),
            "adminEvaluationRequestedAt": _read_str(snapshot, "adminEvaluationRequestedAt") or None,
        },
        "summary": {
            "businessName": website_name,
            "appName": app_name,
            "paletteColors": len(colors),
            "hasLogo": logo_meta is not None,
        },
    }


def mask_logo_data(document: Dict[str, Any]) -> Dict[str, Any]:
    """Deep copy with embedded logo bytes replaced by a size label."""
    display = copy.deepcopy(document)
    logo = (display.get("branding") or {}).get("logo")
    if isinstance(logo, dict) and logo.get("data"):
        logo["data"] = f"(Base64 image data - {estimate_kb(str(logo['data']))}KB)"
    return display


def get_data_for_display(snapshot: Mapping[str, Any]) -> Dict[str, Any]:
    return mask_logo_data(collect_all_data(snapshot))


def get_formatted_json(snapshot: Mapping[str, Any]) -> str:
    return json.dumps(get_data_for_display(snapshot), indent=2, ensure_ascii=False)


def get_summary(snapshot: Mapping[str, Any]) -> Dict[str, Any]:
    data = collect_all_data(snapshot)
    logo = data["branding"]["logo"]
    return {
        "businessName": data["profile"]["websiteName"],
        "appName": data["website"]["appName"],
        "catalogStyle": data["website"]["catalog"],
        "productLayout": data["website"]["productLayout"],
        "paletteColors": len(data["branding"]["palette"]["colors"]),
        "hasLogo": bool(logo and logo.get("data")),
        "timestamp": data["meta"]["timestamp"],
    }


def download_as_json(snapshot: Mapping[str, Any], filename: Optional[str] = None, directory: str = ".") -> str:
    """Write the full document (logo data included) to disk and return the file path."""
    name = filename or f"site-config-{int(time.time() * 1000)}.json"
    path = os.path.join(directory, name)
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(collect_all_data(snapshot), f, indent=2, ensure_ascii=False)
    logger.info(f"[collector] saved {path}")
    return path


_SEND_OPTIONS = ("method", "content", "timeout")


async def send_to_backend(
    snapshot: Mapping[str, Any],
    endpoint: str,
    options: Optional[Dict[str, Any]] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    """POST the collected document to `endpoint`.

    `options` may carry method, headers, content (or fetch-style body) and
    timeout; other keys are ignored. Caller headers are merged over the JSON
    content-type default; the rest override defaults.
    Non-2xx responses are reported the same way as transport failures.
    """
    opts = dict(options or {})
    headers = {"Content-Type": "application/json"}
    headers.update(opts.pop("headers", None) or {})
    request: Dict[str, Any] = {
        "method": "POST",
        "content": json.dumps(collect_all_data(snapshot), ensure_ascii=False),
    }
    if "body" in opts and "content" not in opts:
        opts["content"] = opts["body"]
    for key in _SEND_OPTIONS:
        if key in opts:
            request[key] = opts[key]
    request["headers"] = headers

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=10.0) as c:
                response = await c.request(url=endpoint, **request)
        else:
            response = await client.request(url=endpoint, **request)
        if not response.is_success:
            raise httpx.HTTPStatusError(
                f"HTTP error! status: {response.status_code}",
                request=response.request,
                response=response,
            )
        result = response.json()
    except (httpx.HTTPError, ValueError, TypeError) as ex:
        logger.warning(f"[collector] send to {endpoint} failed: {ex}")
        return {
            "success": False,
            "error": str(ex),
            "message": f"Error sending data: {ex}",
        }
    return {
        "success": True,
        "data": result,
        "message": "Data sent successfully",
    }
