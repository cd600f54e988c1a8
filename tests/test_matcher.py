import pytest

from models.base import HelperOffering, MatchStatus, SeverityTier
from services.matcher import (
    MAX_MATCHES,
    derive_needs,
    match,
    need_match_ratio,
    score_match,
)


@pytest.fixture
def flooded_home(make_assessment):
    """Scenario A household: water inside, cannot stay, no power"""
    return make_assessment(
        id="flooded",
        water_inside="yes",
        can_stay_home="no",
        electricity_working="no",
        damaged_items=["food", "electronics"],
    )


class TestScenarios:
    def test_scenario_a_same_location(self, make_helper, flooded_home):
        """A critical home at the helper's own location is matched with a high score"""
        helper = make_helper(offerings=["food"])
        assert flooded_home.severity == SeverityTier.CRITICAL

        matches = match(helper, [flooded_home])

        assert len(matches) == 1
        m = matches[0]
        assert m.assessment_id == "flooded"
        assert m.helper_id == helper.id
        assert m.distance_km == pytest.approx(0.0)
        # 40 severity + 30 distance + 15 (food covered, electronics not)
        assert m.match_score == 85
        assert m.status == MatchStatus.PENDING
        assert m.id is None

    def test_scenario_b_outside_radius(self, make_helper, make_assessment, colombo, north):
        """Assessments beyond the radius are never matched"""
        helper = make_helper()
        far = make_assessment(
            location=north(colombo, 15),
            water_inside="yes",
            can_stay_home="no",
        )
        assert far.severity == SeverityTier.CRITICAL
        assert match(helper, [far]) == []

    def test_scenario_c_severity_before_distance(self, make_helper, make_assessment, colombo, north):
        """A farther Critical report ranks ahead of a nearer Low one"""
        helper = make_helper()
        critical = make_assessment(id="critical", location=north(colombo, 8), severity=SeverityTier.CRITICAL)
        low = make_assessment(id="low", location=north(colombo, 1), severity=SeverityTier.LOW)

        matches = match(helper, [low, critical])

        assert [m.assessment_id for m in matches] == ["critical", "low"]
        assert matches[0].distance_km == pytest.approx(8.0)
        assert matches[1].distance_km == pytest.approx(1.0)


class TestFiltering:
    def test_inactive_helper_gets_nothing(self, make_helper, flooded_home):
        """Inactive helpers get no matches"""
        assert match(make_helper(active=False), [flooded_home]) == []

    def test_helper_without_location_gets_nothing(self, make_helper, flooded_home):
        """Helpers without a location get no matches"""
        assert match(make_helper(location=None), [flooded_home]) == []

    def test_assessment_without_location_is_skipped(self, make_helper, make_assessment):
        """Assessments without a location are skipped"""
        located = make_assessment(id="located")
        unlocated = make_assessment(id="unlocated", location=None, severity=SeverityTier.CRITICAL)

        matches = match(make_helper(), [unlocated, located])

        assert [m.assessment_id for m in matches] == ["located"]

    def test_boundary_is_inclusive(self, make_helper, make_assessment, colombo, north):
        """An assessment exactly on the radius is included"""
        helper = make_helper(radius_km=5)
        edge = make_assessment(location=north(colombo, 4.999999))
        matches = match(helper, [edge])
        assert len(matches) == 1
        assert matches[0].distance_km <= helper.radius_km

    def test_empty_snapshot(self, make_helper):
        """No assessments means no matches"""
        assert match(make_helper(), []) == []


class TestOrderingAndBounds:
    def test_never_more_than_ten(self, make_helper, make_assessment, colombo, north):
        """At most ten matches are returned"""
        assessments = [
            make_assessment(id=f"a{i}", location=north(colombo, i * 0.4))
            for i in range(25)
        ]
        matches = match(make_helper(), assessments)
        assert len(matches) == MAX_MATCHES == 10
        assert all(0 <= m.distance_km <= 10 for m in matches)

    def test_distance_breaks_severity_ties(self, make_helper, make_assessment, colombo, north):
        """Within a tier the nearer report comes first"""
        assessments = [
            make_assessment(id="far", location=north(colombo, 6), severity=SeverityTier.HIGH),
            make_assessment(id="near", location=north(colombo, 2), severity=SeverityTier.HIGH),
            make_assessment(id="mid", location=north(colombo, 4), severity=SeverityTier.HIGH),
        ]
        matches = match(make_helper(), assessments)
        assert [m.assessment_id for m in matches] == ["near", "mid", "far"]

    def test_full_ordering(self, make_helper, make_assessment, colombo, north):
        """Matches sort by tier first and distance second"""
        assessments = [
            make_assessment(id="low-near", location=north(colombo, 1), severity=SeverityTier.LOW),
            make_assessment(id="high-far", location=north(colombo, 9), severity=SeverityTier.HIGH),
            make_assessment(id="moderate", location=north(colombo, 3), severity=SeverityTier.MODERATE),
            make_assessment(id="critical-far", location=north(colombo, 9.5), severity=SeverityTier.CRITICAL),
            make_assessment(id="high-near", location=north(colombo, 2), severity=SeverityTier.HIGH),
        ]
        matches = match(make_helper(), assessments)
        assert [m.assessment_id for m in matches] == [
            "critical-far", "high-near", "high-far", "moderate", "low-near",
        ]

    def test_truncation_follows_urgency_not_score(self, make_helper, make_assessment, colombo, north):
        """A well-covered nearby Low case does not displace ten distant Critical ones"""
        helper = make_helper(offerings=["food", "water", "medicine-pickup"])
        criticals = [
            make_assessment(id=f"c{i}", location=north(colombo, 9.9), severity=SeverityTier.CRITICAL)
            for i in range(10)
        ]
        low = make_assessment(
            id="low", location=colombo, severity=SeverityTier.LOW,
            damaged_items=["food"], has_children=True,
        )

        matches = match(helper, [low] + criticals)

        assert len(matches) == 10
        assert "low" not in [m.assessment_id for m in matches]
        assert score_match(helper, low, 0.0) == 70
        assert all(m.match_score < 70 for m in matches)

    def test_inputs_are_not_mutated(self, make_helper, make_assessment, colombo, north):
        """Matching leaves helper and assessments unchanged"""
        helper = make_helper()
        assessments = [
            make_assessment(id="b", location=north(colombo, 3), severity=SeverityTier.LOW),
            make_assessment(id="a", location=north(colombo, 1), severity=SeverityTier.CRITICAL),
        ]
        snapshot = list(assessments)
        dumped = [a.model_dump() for a in assessments]

        match(helper, assessments)

        assert assessments == snapshot
        assert [a.model_dump() for a in assessments] == dumped

    def test_deterministic(self, make_helper, make_assessment, colombo, north):
        """The same inputs give the same matches"""
        helper = make_helper()
        assessments = [
            make_assessment(id=f"a{i}", location=north(colombo, i), severity=list(SeverityTier)[i % 4])
            for i in range(8)
        ]
        first = [(m.assessment_id, m.match_score, m.distance_km) for m in match(helper, assessments)]
        second = [(m.assessment_id, m.match_score, m.distance_km) for m in match(helper, assessments)]
        assert first == second


class TestScoring:
    def test_severity_component(self, make_helper, make_assessment):
        """Severity contributes ten points per tier weight"""
        helper = make_helper(offerings=[])
        for tier, expected in [
            (SeverityTier.LOW, 10),
            (SeverityTier.MODERATE, 20),
            (SeverityTier.HIGH, 30),
            (SeverityTier.CRITICAL, 40),
        ]:
            assessment = make_assessment(severity=tier)
            # distance at the radius boundary contributes nothing
            assert score_match(helper, assessment, helper.radius_km) == expected

    def test_distance_component_decays_linearly(self, make_helper, make_assessment):
        """Proximity points fall linearly to zero at the radius"""
        helper = make_helper(offerings=[], radius_km=10)
        assessment = make_assessment(severity=SeverityTier.LOW)
        assert score_match(helper, assessment, 0) == 40
        assert score_match(helper, assessment, 5) == 25
        assert score_match(helper, assessment, 10) == 10

    def test_score_monotonic_in_distance(self, make_helper, make_assessment):
        """Moving farther away never raises the score"""
        helper = make_helper(radius_km=10)
        assessment = make_assessment(damaged_items=["food", "documents", "electronics"], has_elderly=True)
        scores = [score_match(helper, assessment, d / 10) for d in range(0, 101)]
        assert all(a >= b for a, b in zip(scores, scores[1:]))

    def test_score_monotonic_in_severity(self, make_helper, make_assessment):
        """A higher tier never lowers the score"""
        helper = make_helper()
        scores = [
            score_match(helper, make_assessment(severity=tier, damaged_items=["food"]), 3.0)
            for tier in sorted(SeverityTier)
        ]
        assert scores == sorted(scores)

    def test_score_range(self, make_helper, make_assessment):
        """Scores span 0 to 100"""
        helper = make_helper(offerings=[o.value for o in HelperOffering])
        best = make_assessment(severity=SeverityTier.CRITICAL, damaged_items=["food", "furniture"], has_sick_person=True)
        worst = make_assessment(severity=SeverityTier.LOW, damaged_items=[])
        assert score_match(helper, best, 0) == 100
        assert score_match(make_helper(offerings=[]), worst, 10) == 10

    def test_no_needs_scores_zero_need_component(self, make_helper, make_assessment):
        """Reports without needs get no need points"""
        helper = make_helper(offerings=["food", "water"])
        assessment = make_assessment(severity=SeverityTier.MODERATE)
        assert score_match(helper, assessment, 10) == 20


class TestNeeds:
    def test_derive_needs(self, make_assessment):
        """Needs come from damaged items and vulnerable people"""
        assessment = make_assessment(
            damaged_items=["Food", "documents"],
            has_elderly=True,
            has_children=False,
            has_sick_person=True,
        )
        assert derive_needs(assessment) == {"food", "documents", "elderly", "sick"}

    def test_derive_needs_empty(self, make_assessment):
        """A report with nothing damaged and nobody vulnerable has no needs"""
        assert derive_needs(make_assessment()) == frozenset()

    def test_need_match_ratio(self):
        """The ratio is the share of needs the helper can cover"""
        assert need_match_ratio([HelperOffering.FOOD], ["food", "electronics"]) == 0.5
        assert need_match_ratio([HelperOffering.DRY_RATIONS], ["food"]) == 1.0
        assert need_match_ratio([HelperOffering.TRANSPORT], ["sick", "elderly"]) == 0.5
        assert need_match_ratio([HelperOffering.WATER], ["children"]) == 1.0
        assert need_match_ratio([HelperOffering.CLEANUP_SUPPORT], ["furniture", "documents", "other"]) == 1.0

    def test_no_needs_ratio_is_zero(self):
        """No needs gives a ratio of zero"""
        assert need_match_ratio([HelperOffering.FOOD], []) == 0.0

    def test_unknown_need_is_never_covered(self):
        """Needs outside the table are never covered"""
        assert need_match_ratio(list(HelperOffering), ["boat"]) == 0.0
