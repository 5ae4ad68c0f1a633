import unittest

from capwise.core.monte_carlo import SimulationConfig
from capwise.core.random_source import seeded_driver
from capwise.core.valuation import present_value
from capwise.engine import CapitalProjectEngine, ProjectInputs
from capwise.models.risk import RiskItem, RiskLevel
from capwise.models.scenario import ScenarioType
from capwise.reporting.narrative import AdvisorService, NarrativeSource, make_cache_key


class CapitalProjectEngineTests(unittest.TestCase):
    def test_single_year_end_to_end(self) -> None:
        engine = CapitalProjectEngine(ProjectInputs(years=1))
        self.assertEqual(engine.cash_flow_series(), [-800_000_000.0, 230_000_000.0])
        self.assertAlmostEqual(engine.valuation().npv, -616_000_000.0, places=4)

    def test_default_project_valuation(self) -> None:
        kpis = CapitalProjectEngine().valuation()
        annuity = (1 - 1.25 ** -5) / 0.25
        self.assertAlmostEqual(kpis.npv, -800_000_000.0 + 230_000_000.0 * annuity, places=2)
        self.assertTrue(kpis.irr_available)
        self.assertLess(kpis.irr, kpis.effective_rate)

    def test_scenarios_and_real_rate(self) -> None:
        optimistic = CapitalProjectEngine(ProjectInputs(scenario=ScenarioType.OPTIMISTIC))
        self.assertAlmostEqual(
            optimistic.scenario_schedule()[0].net,
            450_000_000.0 * 1.12 - 220_000_000.0 * 0.95,
        )
        self.assertEqual(optimistic.baseline_schedule[0].net, 230_000_000.0)

        real = CapitalProjectEngine(ProjectInputs(use_real_rate=True))
        self.assertAlmostEqual(real.effective_rate(), 1.25 / 1.35 - 1.0)
        self.assertAlmostEqual(
            real.valuation().npv,
            present_value(real.cash_flow_series(), 1.25 / 1.35 - 1.0),
        )

    def test_npv_profile(self) -> None:
        profile = CapitalProjectEngine().npv_profile()
        self.assertAlmostEqual(profile["npv"].iloc[0], -800_000_000.0 + 5 * 230_000_000.0)

    def test_monte_carlo_and_summary(self) -> None:
        engine = CapitalProjectEngine()
        outcomes = engine.run_monte_carlo(SimulationConfig(trial_count=400), seeded_driver(8))
        summary = engine.summarize(outcomes)
        self.assertEqual(summary.count, 400)
        self.assertLessEqual(summary.p10, summary.p50)
        self.assertLessEqual(summary.p50, summary.p90)
        self.assertTrue(engine.summarize([]).is_empty)

    def test_risk_assessment(self) -> None:
        engine = CapitalProjectEngine()
        self.assertEqual(engine.risk_assessment().project_level, RiskLevel.MEDIUM)
        engine.set_risks([RiskItem(name="Market risk", probability=5, impact=5)])
        assessment = engine.risk_assessment(top_k=3)
        self.assertEqual(assessment.project_score, 25)
        self.assertEqual(len(assessment.mitigations), 1)

    def test_narrative_payload_and_fallback(self) -> None:
        engine = CapitalProjectEngine(ProjectInputs(project_name="Plant"))
        kpis = engine.valuation()
        payload = engine.advisor_payload(kpis)
        self.assertEqual(payload.project_name, "Plant")
        self.assertEqual(payload.discount_rate, 0.25)
        self.assertEqual(payload.npv, kpis.npv)
        narrative = engine.narrative(AdvisorService())
        self.assertEqual(narrative.source, NarrativeSource.FALLBACK)
        self.assertIn("Not recommended", narrative.text)

    def test_cache_params_are_stable(self) -> None:
        first = CapitalProjectEngine()
        second = CapitalProjectEngine()
        key_a = make_cache_key(first.cache_params(first.valuation()))
        key_b = make_cache_key(second.cache_params(second.valuation()))
        self.assertEqual(key_a, key_b)
        third = CapitalProjectEngine(ProjectInputs(scenario=ScenarioType.PESSIMISTIC))
        self.assertNotEqual(key_a, make_cache_key(third.cache_params(third.valuation())))


if __name__ == "__main__":
    unittest.main()
