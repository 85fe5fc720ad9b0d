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

# Match score between a candidate profile and an internship. Used for
# student-facing recommendations and for recruiter applicant ranking alike.

import re
from typing import Any, List

from shared.api import MatchScore
from shared.types import Internship, Profile

SKILLS_WEIGHT = 40
SKILLS_WEIGHT_WITHOUT_REQUIREMENTS = 20

# (minimum monthly stipend, points), highest first.
STIPEND_TIERS = ((20000, 25), (15000, 20), (10000, 15))
STIPEND_FLOOR_POINTS = 10
GOOD_STIPEND = 15000

REMOTE_POINTS = 15
LOCATION_MATCH_POINTS = 12
LOCATION_FLOOR_POINTS = 5

SECTOR_MATCH_POINTS = 10
SECTOR_FLOOR_POINTS = 5

TIER_1_COMPANIES = frozenset({"google", "microsoft", "amazon", "meta", "apple"})
TIER_2_COMPANIES = frozenset({"uber", "airbnb", "adobe", "salesforce", "paypal"})
TIER_1_POINTS = 10
TIER_2_POINTS = 8
COMPANY_FLOOR_POINTS = 6

MIN_SCORE = 1
MAX_SCORE = 100

_NUMBER = re.compile(r"\d[\d,]*")


def parse_stipend(stipend: Any) -> int:
    """
    Returns the first amount in a stipend value.

    "₹15,000/month" -> 15000, 12000 -> 12000, "Unpaid" -> 0.
    """
    if isinstance(stipend, bool):
        return 0
    if isinstance(stipend, (int, float)):
        return max(int(stipend), 0)
    if not isinstance(stipend, str):
        return 0
    match = _NUMBER.search(stipend)
    if not match:
        return 0
    return int(match.group(0).replace(",", ""))


def _city(location: Any) -> str:
    if isinstance(location, dict):
        location = location.get("city")
    return location.strip().lower() if isinstance(location, str) else ""


def _matched_skills(required: List[str], candidate: List[str]) -> List[str]:
    candidate_lower = [s.lower() for s in candidate if s]
    matched = []
    for skill in required:
        needle = skill.lower()
        if not needle:
            continue
        if any(needle in have or have in needle for have in candidate_lower):
            matched.append(skill)
    return matched


def _skills_points(required: List[str], matched: List[str]) -> float:
    if not required:
        return SKILLS_WEIGHT_WITHOUT_REQUIREMENTS
    return len(matched) / len(required) * SKILLS_WEIGHT


def _stipend_points(amount: int) -> int:
    for threshold, points in STIPEND_TIERS:
        if amount >= threshold:
            return points
    return STIPEND_FLOOR_POINTS


def _location_points(profile: Profile, internship: Internship) -> int:
    internship_city = _city(internship.location)
    work_mode = (internship.work_mode or "").strip().lower()
    if internship_city == "remote" or work_mode == "remote":
        return REMOTE_POINTS
    candidate_city = _city(profile.desired_location) or _city(profile.location)
    if candidate_city and internship_city and (
        candidate_city in internship_city or internship_city in candidate_city
    ):
        return LOCATION_MATCH_POINTS
    return LOCATION_FLOOR_POINTS


def _sector_match(profile: Profile, internship: Internship) -> bool:
    tags = set(t.lower() for t in internship.sector_tags or [])
    if internship.sector:
        tags.add(internship.sector.lower())
    interests = set(
        t.lower() for t in (profile.interests or []) + (profile.sectors or [])
    )
    return bool(tags & interests)


def _company_points(internship: Internship) -> int:
    company = (internship.company_name or internship.company or "").strip().lower()
    if company in TIER_1_COMPANIES:
        return TIER_1_POINTS
    if company in TIER_2_COMPANIES:
        return TIER_2_POINTS
    return COMPANY_FLOOR_POINTS


def score_match(profile: Profile, internship: Internship) -> MatchScore:
    """
    Scores how well a candidate fits an internship, from 1 to 100.

    Weighted sum of skills overlap (40), stipend tier (25), location (15),
    sector overlap (10) and company tier (10). Skill matching is a
    case-insensitive substring test in either direction.
    """
    required = internship.skills or internship.required_skills or []
    matched = _matched_skills(required, profile.skills or [])
    stipend = parse_stipend(internship.stipend)
    sector_match = _sector_match(profile, internship)

    score = (
        _skills_points(required, matched)
        + _stipend_points(stipend)
        + _location_points(profile, internship)
        + (SECTOR_MATCH_POINTS if sector_match else SECTOR_FLOOR_POINTS)
        + _company_points(internship)
    )
    score = min(MAX_SCORE, max(MIN_SCORE, round(score)))

    reasons = []
    if matched:
        reasons.append(f"{len(matched)}/{len(required)} skills match.")
    if stipend >= GOOD_STIPEND:
        reasons.append("Good stipend.")
    if sector_match:
        reasons.append("Sector alignment.")
    explanation = " ".join(reasons) or "Good match based on your profile"

    return MatchScore(score=score, explanation=explanation, matched_skills=matched)
