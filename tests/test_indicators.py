import math

import pytest

from phytoanalysis import indicators


def _specimen(name: str, portion: str, cap1: float = 10.0, height: float = 5.0, **caps) -> dict:
    row = {"scientific_name": name, "portion": portion, "cap1": cap1, "height": height}
    row.update(caps)
    return row


def test_basal_area_and_volume_formulas():
    abi = indicators.individual_basal_area_cm2([10.0, 20.0])

    assert abi == pytest.approx((100 + 400) / (4 * math.pi))
    assert indicators.basal_area_m2(abi) == pytest.approx(abi / 10_000)
    assert indicators.volume_m3(2.0, 3.0) == pytest.approx(6.0)


def test_dbh_from_single_cap_is_cap_over_pi():
    abi = indicators.individual_basal_area_cm2([31.4])
    assert indicators.dbh_cm(abi) == pytest.approx(31.4 / math.pi)
    assert indicators.dbh_cm(0) == 0.0


def test_caps_of_skips_missing_values():
    assert indicators.caps_of({"cap1": 1, "cap2": None, "cap3": 3}) == [1.0, 3.0]


def test_no_specimens_still_reports_plot_layout():
    out = indicators.compute([], portion_area=100.0, portion_quantity=4)

    assert out.individuals_count == 0
    assert out.species_count == 0
    assert out.plots_count == 4
    assert out.plots_area == 400.0
    assert out.density is None
    assert out.collector_curve is None


def test_diversity_indices_for_two_even_species():
    specimens = [_specimen("A", "1"), _specimen("B", "1"), _specimen("A", "2"), _specimen("B", "2")]
    out = indicators.compute(specimens, portion_area=100.0, portion_quantity=2)

    assert out.individuals_count == 4
    assert out.species_count == 2
    assert out.sampled_area_ha == pytest.approx(0.02)
    assert out.density == pytest.approx(200.0)
    assert out.shannon_index == pytest.approx(math.log(2))
    assert out.simpson_index == pytest.approx(0.5)
    assert out.pielou_evenness_index == pytest.approx(1.0)


def test_single_species_has_no_pielou():
    out = indicators.compute([_specimen("A", "1")], portion_area=10.0, portion_quantity=1)

    assert out.shannon_index == pytest.approx(0.0)
    assert out.simpson_index == pytest.approx(1.0)
    assert out.pielou_evenness_index is None


def test_species_data_relative_density_and_frequency():
    specimens = [_specimen("A", "1"), _specimen("A", "1"), _specimen("B", "2")]
    out = indicators.compute(specimens, portion_area=50.0, portion_quantity=4)
    by_name = {s.scientific_name: s for s in out.species_data}

    assert [s.scientific_name for s in out.species_data] == ["A", "B"]
    assert by_name["A"].dr == pytest.approx(200 / 3)
    assert by_name["A"].fa == pytest.approx(25.0)
    assert by_name["B"].fa == pytest.approx(25.0)
    assert by_name["A"].da == pytest.approx(2 / 0.02)


def test_volume_totals():
    specimens = [_specimen("A", "1", cap1=20.0, height=10.0)]
    out = indicators.compute(specimens, portion_area=100.0, portion_quantity=1)
    g = (20.0 * 20.0) / (4 * math.pi) / 10_000

    assert out.replacement_volume == pytest.approx(g * 10.0)
    assert out.volume == pytest.approx(g * 10.0 / 0.01)
    assert out.basal_area == pytest.approx(g / 0.01)


def test_collector_curve_accumulates_species_per_plot():
    specimens = [_specimen("A", "1"), _specimen("B", "1"), _specimen("A", "2"), _specimen("C", "3")]
    curve = indicators.collector_curve(specimens, 100.0)

    assert [(p.cumulative_area, p.observed_species) for p in curve] == [(0.0, 0), (100.0, 2), (200.0, 2), (300.0, 3)]
    assert all(p.trend_species >= 0 for p in curve)
    assert curve[-1].trend_species > curve[1].trend_species
