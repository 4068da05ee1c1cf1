"""
Mutation payload shapes for the batch runner.

Each job only decides which mutation to send and how a WorkItem becomes its
variables; retries, batching and progress tracking are shared.
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from ..shopify.mutations import (
    COLLECTION_UPDATE,
    CUSTOMER_DELETE,
    ORDER_DELETE,
    PRODUCT_FEATURE_LIST_UPDATE,
    PRODUCT_HANDLE_UPDATE,
    PRODUCT_MEDIA_ADD,
    PRODUCT_REORDER_MEDIA,
    PRODUCT_SEO_UPDATE,
    TAGS_ADD,
    TRANSLATIONS_REGISTER,
)
from .models import TranslatableContent, TranslatableResource, WorkItem


@dataclass(frozen=True)
class MutationJob:
    """A mutation and the function building its variables from a WorkItem."""

    label: str
    mutation: str
    root_field: str
    build_variables: Callable[[WorkItem], Dict[str, Any]]
    user_errors_key: str = "userErrors"


def _translation_variables(item: WorkItem) -> Dict[str, Any]:
    return {
        "resourceId": item.resource_id,
        "translations": [
            {
                "key": f.key,
                "locale": item.locale,
                "value": f.value,
                "translatableContentDigest": f.digest,
            }
            for f in item.fields
        ],
    }


def translation_job() -> MutationJob:
    return MutationJob(
        label="Translation",
        mutation=TRANSLATIONS_REGISTER,
        root_field="translationsRegister",
        build_variables=_translation_variables,
    )


def tags_add_job(tags: Sequence[str]) -> MutationJob:
    tag_list: List[str] = list(tags)
    return MutationJob(
        label="Tags add",
        mutation=TAGS_ADD,
        root_field="tagsAdd",
        build_variables=lambda item: {"id": item.resource_id, "tags": tag_list},
    )


def customer_delete_job() -> MutationJob:
    return MutationJob(
        label="Customer delete",
        mutation=CUSTOMER_DELETE,
        root_field="customerDelete",
        build_variables=lambda item: {"input": {"id": item.resource_id}},
    )


def order_delete_job() -> MutationJob:
    return MutationJob(
        label="Order delete",
        mutation=ORDER_DELETE,
        root_field="orderDelete",
        build_variables=lambda item: {"orderId": item.resource_id},
    )


def _handle_variables(item: WorkItem) -> Dict[str, Any]:
    handle = next(f.value for f in item.fields if f.key == "handle")
    return {
        "product": {
            "id": item.resource_id,
            "handle": handle,
            "redirectNewHandle": True,
        }
    }


def handle_override_job() -> MutationJob:
    return MutationJob(
        label="Handle override",
        mutation=PRODUCT_HANDLE_UPDATE,
        root_field="productUpdate",
        build_variables=_handle_variables,
    )


def _field_values(item: WorkItem) -> Dict[str, str]:
    return {f.key: f.value for f in item.fields}


def parse_feature_list(value: Optional[str]) -> Optional[List[str]]:
    """Features from a JSON array string, or None unless it is a non-empty array."""
    if not value:
        return None
    try:
        features = json.loads(value)
    except ValueError:
        return None
    if not isinstance(features, list) or not features:
        return None
    return [str(f) for f in features]


def _feature_list_variables(item: WorkItem) -> Dict[str, Any]:
    features = parse_feature_list(_field_values(item)["feature_list"])
    return {
        "product": {
            "id": item.resource_id,
            "metafields": [
                {
                    "namespace": "custom",
                    "key": "feature_list",
                    "type": "list.single_line_text_field",
                    "value": json.dumps(features, ensure_ascii=False),
                }
            ],
        }
    }


def feature_list_job() -> MutationJob:
    return MutationJob(
        label="Feature list",
        mutation=PRODUCT_FEATURE_LIST_UPDATE,
        root_field="productUpdate",
        build_variables=_feature_list_variables,
    )


def _seo_variables(item: WorkItem) -> Dict[str, Any]:
    values = _field_values(item)
    seo = {}
    if "seo_title" in values:
        seo["title"] = values["seo_title"]
    if "seo_description" in values:
        seo["description"] = values["seo_description"]
    return {"product": {"id": item.resource_id, "seo": seo}}


def seo_update_job() -> MutationJob:
    """Product SEO title/description; only the pending fields are sent."""
    return MutationJob(
        label="SEO update",
        mutation=PRODUCT_SEO_UPDATE,
        root_field="productUpdate",
        build_variables=_seo_variables,
    )


def _video_variables(item: WorkItem) -> Dict[str, Any]:
    return {
        "product": {"id": item.resource_id},
        "media": [
            {
                "mediaContentType": "EXTERNAL_VIDEO",
                "originalSource": _field_values(item)["video_url"],
            }
        ],
    }


def product_video_job() -> MutationJob:
    return MutationJob(
        label="Add video",
        mutation=PRODUCT_MEDIA_ADD,
        root_field="productUpdate",
        build_variables=_video_variables,
    )


def media_reorder_job(position: int = 1) -> MutationJob:
    """Move one media item of a product to a zero-based position."""
    return MutationJob(
        label="Reorder media",
        mutation=PRODUCT_REORDER_MEDIA,
        root_field="productReorderMedia",
        build_variables=lambda item: {
            "id": item.resource_id,
            "moves": [{"id": _field_values(item)["media_id"], "newPosition": str(position)}],
        },
        user_errors_key="mediaUserErrors",
    )


def video_reorder_rows(
    products: Iterable[Dict[str, Any]], position: int = 1
) -> List[Dict[str, str]]:
    """
    Rows for media_reorder_job from a product media export.

    Picks the first external video of each product with at least two media
    items, unless it already sits at `position`.
    """
    rows = []
    for product in products:
        media = product.get("media") or []
        if len(media) < 2:
            continue
        index = next(
            (i for i, m in enumerate(media) if m.get("mediaContentType") == "EXTERNAL_VIDEO"),
            None,
        )
        if index is None or index == position:
            continue
        rows.append({"id": product["id"], "media_id": media[index]["id"]})
    return rows


def description_to_html(description: str) -> str:
    """Blank-line separated paragraphs to <p> blocks, single newlines to <br>."""
    blocks = description.split("\n\n")
    return "\n".join("<p>" + block.replace("\n", "<br>") + "</p>" for block in blocks)


def _collection_variables(item: WorkItem) -> Dict[str, Any]:
    values = _field_values(item)
    collection: Dict[str, Any] = {"id": item.resource_id}
    if "title" in values:
        collection["title"] = values["title"]
    if "handle" in values:
        collection["handle"] = values["handle"]
        collection["redirectNewHandle"] = True
    if "description" in values:
        collection["descriptionHtml"] = description_to_html(values["description"])
    return {"input": collection}


def collection_override_job() -> MutationJob:
    return MutationJob(
        label="Collection override",
        mutation=COLLECTION_UPDATE,
        root_field="collectionUpdate",
        build_variables=_collection_variables,
    )


def identity_resources(resource_ids: Iterable[str], *field_keys: str) -> List[TranslatableResource]:
    """
    Lookup records for jobs without remote content digests.

    The resource id stands in for the digest of every given field, so deletes,
    tag adds and product updates get the same skip-if-done behaviour as
    translations.
    """
    return [
        TranslatableResource(
            resource_id=rid,
            translatable_content=[
                TranslatableContent(key=key, digest=rid) for key in field_keys
            ],
        )
        for rid in dict.fromkeys(resource_ids)
        if rid
    ]
