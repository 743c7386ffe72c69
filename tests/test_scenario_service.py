import pytest

from portfolio_tracker.models import Category, MarketScenario, ScenarioTier
from portfolio_tracker.services.scenario_service import ScenarioService, _round_half_up

GROWTH = MarketScenario.GROWTH


class TestStrengthScore:
    def test_zero_exposure_scores_zero(self):
        assert ScenarioService.strength_score(0.0, 3) == 0

    def test_exposure_component_caps_at_seventy(self):
        assert ScenarioService.strength_score(50.0, 0) == 70
        assert ScenarioService.strength_score(100.0, 0) == 70

    def test_diversity_bonus_caps_at_three_categories(self):
        assert ScenarioService.strength_score(100.0, 3) == 100
        assert ScenarioService.strength_score(100.0, 6) == 100

    def test_score_is_an_int(self):
        score = ScenarioService.strength_score(33.3, 1)
        assert isinstance(score, int)
        assert score == 57  # 46.62 + 10

    @pytest.mark.parametrize("categories", [0, 1, 2, 3, 4])
    def test_monotonic_in_exposure(self, categories):
        scores = [ScenarioService.strength_score(e / 2, categories) for e in range(0, 201)]
        assert scores == sorted(scores)
        assert all(0 <= s <= 100 for s in scores)

    @pytest.mark.parametrize("exposure", [0.5, 10.0, 33.3, 49.9, 75.0])
    def test_monotonic_in_categories(self, exposure):
        scores = [ScenarioService.strength_score(exposure, c) for c in range(0, 8)]
        assert scores == sorted(scores)


class TestClassifyTier:
    @pytest.mark.parametrize(
        "score, tier",
        [
            (100, ScenarioTier.STRONG),
            (70, ScenarioTier.STRONG),
            (69, ScenarioTier.MODERATE),
            (40, ScenarioTier.MODERATE),
            (39, ScenarioTier.WEAK),
            (15, ScenarioTier.WEAK),
            (14, ScenarioTier.NONE),
            (0, ScenarioTier.NONE),
        ],
    )
    def test_thresholds(self, score, tier):
        assert ScenarioService.classify_tier(score) == tier


class TestAnalyze:
    def test_empty_lots(self):
        assert ScenarioService.analyze([]) == []

    def test_growth_with_two_categories(self, make_lot):
        lots = [
            make_lot(quantity=10, purchase_price=100, category=Category.EQUITY, market_scenarios=[GROWTH]),
            make_lot(quantity=5, purchase_price=100, category=Category.CRYPTO, market_scenarios=[GROWTH]),
            make_lot(quantity=5, purchase_price=100, category=Category.EQUITY, market_scenarios=[GROWTH]),
            make_lot(quantity=10, purchase_price=100, category=Category.CASH),
        ]

        analyses = ScenarioService.analyze(lots)
        growth = next(a for a in analyses if a.scenario == GROWTH)

        assert growth.exposure == 66.67
        assert growth.exposure_value == pytest.approx(2000)
        assert growth.investment_count == 3
        assert growth.strength_score == 90
        assert ScenarioService.classify_tier(growth.strength_score) == ScenarioTier.STRONG
        assert growth.label == "Economic Growth"
        assert analyses[0] is growth

    def test_all_scenarios_present(self, make_lot):
        analyses = ScenarioService.analyze([make_lot(market_scenarios=[MarketScenario.INFLATION])])
        assert {a.scenario for a in analyses} == set(MarketScenario)

    def test_ties_keep_declaration_order(self, make_lot):
        analyses = ScenarioService.analyze([make_lot()])

        assert all(a.strength_score == 0 for a in analyses)
        assert [a.scenario for a in analyses] == list(MarketScenario)

    def test_sorted_descending_and_stable(self, make_lot):
        lots = [
            make_lot(
                quantity=1,
                purchase_price=100,
                market_scenarios=[MarketScenario.RECESSION, MarketScenario.DEFLATION],
            ),
            make_lot(quantity=1, purchase_price=100, market_scenarios=[MarketScenario.GROWTH]),
            make_lot(quantity=2, purchase_price=100),
        ]

        analyses = ScenarioService.analyze(lots)
        scores = [a.strength_score for a in analyses]

        assert scores == sorted(scores, reverse=True)
        # Deflation and recession tie at 25% exposure; growth ties with them too
        assert [a.scenario for a in analyses[:3]] == [
            MarketScenario.DEFLATION,
            MarketScenario.RECESSION,
            MarketScenario.GROWTH,
        ]

    def test_duplicate_category_adds_no_bonus(self, make_lot):
        lots = [
            make_lot(quantity=1, purchase_price=100, market_scenarios=[GROWTH]),
            make_lot(quantity=1, purchase_price=100, market_scenarios=[GROWTH]),
            make_lot(quantity=8, purchase_price=100),
        ]
        growth = next(a for a in ScenarioService.analyze(lots) if a.scenario == GROWTH)

        # 20% exposure -> 28, one category -> +10
        assert growth.strength_score == 38

    def test_zero_value_portfolio(self, make_lot):
        lots = [make_lot(current_price=0.0, market_scenarios=[GROWTH])]

        analyses = ScenarioService.analyze(lots)

        assert len(analyses) == len(MarketScenario)
        assert all(a.exposure == 0 and a.strength_score == 0 for a in analyses)
        growth = next(a for a in analyses if a.scenario == GROWTH)
        assert growth.investment_count == 1

    def test_lots_are_not_mutated(self, make_lot):
        lot = make_lot(market_scenarios=[GROWTH])
        _ = ScenarioService.analyze([lot])
        assert lot.market_scenarios == [GROWTH]


class TestCoverage:
    def test_buckets_by_tier(self, make_lot):
        lots = [
            make_lot(quantity=6, purchase_price=100, market_scenarios=[GROWTH]),
            make_lot(
                quantity=3,
                purchase_price=100,
                category=Category.COMMODITY,
                market_scenarios=[MarketScenario.INFLATION],
            ),
            make_lot(
                quantity=1,
                purchase_price=100,
                category=Category.CASH,
                market_scenarios=[MarketScenario.RECESSION],
            ),
        ]
        analyses = ScenarioService.analyze(lots)

        coverage = ScenarioService.coverage(analyses)

        # growth: 60% -> 70 + 10 = 80; inflation: 30% -> 42 + 10 = 52; recession: 10% -> 14 + 10 = 24
        assert [a.scenario for a in coverage.strong] == [GROWTH]
        assert [a.scenario for a in coverage.moderate] == [MarketScenario.INFLATION]
        assert [a.scenario for a in coverage.weak] == [MarketScenario.RECESSION]
        assert len(coverage.uncovered) == 4

    def test_empty(self):
        coverage = ScenarioService.coverage([])
        assert coverage.strong == coverage.moderate == coverage.weak == coverage.uncovered == []


@pytest.mark.parametrize(
    "value, ndigits, expected",
    [
        (0.5, 0, 1.0),
        (2.5, 0, 3.0),
        (-0.4, 0, 0.0),
        (0.125, 2, 0.13),
        (66.66666666666667, 2, 66.67),
    ],
)
def test_round_half_up(value, ndigits, expected):
    assert _round_half_up(value, ndigits) == expected
