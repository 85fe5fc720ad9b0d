# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

# Public Open-Graph preview data for shared internship links. No
# authentication; draft postings are never exposed.

from dataclasses import asdict
from typing import List, Optional

from backend.db import DbClient
from marketplace.errors import InvalidArgumentError, NotFoundError, require_string
from shared.api import OgMetadata
from shared.constants import MAX_OG_BATCH_IDS
from shared.firebase_constants import INTERNSHIPS_COLLECTION
from shared.types import InternshipStatus


def _first(doc: dict, *keys: str):
    for key in keys:
        value = doc.get(key)
        if value:
            return value
    return None


def to_og_metadata(internship_id: str, doc: dict) -> OgMetadata:
    """Builds preview fields from either the recruiter or the scraped schema."""
    return OgMetadata(
        id=internship_id,
        title=_first(doc, "title") or "Internship",
        company=_first(doc, "companyName", "company") or "Company",
        description=_first(doc, "description") or "",
        location=_first(doc, "location") or "India",
        stipend=_first(doc, "stipend") or "Competitive",
        sector=_first(doc, "sector") or "Technology",
        logo=_first(doc, "companyLogoUrl", "logo"),
        work_mode=_first(doc, "workMode", "work_mode") or "Not specified",
    )


def _is_public(doc: Optional[dict]) -> bool:
    return (
        doc is not None
        and InternshipStatus.parse(doc.get("status")) != InternshipStatus.DRAFT
    )


def get_internship_for_og(db: DbClient, internship_id) -> dict:
    internship_id = require_string(internship_id, "Internship ID")
    doc = db.get(INTERNSHIPS_COLLECTION, internship_id)
    if not _is_public(doc):
        raise NotFoundError("Internship not found")
    return asdict(to_og_metadata(internship_id, doc))


def _split_ids(ids) -> List[str]:
    if isinstance(ids, str):
        ids = ids.split(",")
    if not isinstance(ids, (list, tuple)):
        raise InvalidArgumentError("Internship IDs required")
    return list(dict.fromkeys(i.strip() for i in ids if isinstance(i, str) and i.strip()))


def get_internships_for_og(db: DbClient, ids) -> dict:
    """Preview data for up to MAX_OG_BATCH_IDS internships, in request order."""
    internship_ids = _split_ids(ids)
    if not internship_ids:
        raise InvalidArgumentError("Internship IDs required")
    if len(internship_ids) > MAX_OG_BATCH_IDS:
        raise InvalidArgumentError(
            f"At most {MAX_OG_BATCH_IDS} internship IDs can be requested at once"
        )

    internships = []
    for internship_id in internship_ids:
        doc = db.get(INTERNSHIPS_COLLECTION, internship_id)
        if _is_public(doc):
            internships.append(asdict(to_og_metadata(internship_id, doc)))
    if not internships:
        raise NotFoundError("No internships found")

    return {"count": len(internships), "internships": internships}
