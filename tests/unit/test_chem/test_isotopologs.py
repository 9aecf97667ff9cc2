from oligomass.chem import isotopologs
from oligomass.chem import ElementComposition, Spectrum
from scipy.stats import binom, multinomial
import numpy as np
import pytest


@pytest.fixture
def glucose_distribution(glucose):
    return isotopologs.compute_distribution(glucose, cutoff=1e-5, coverage=0.999)


def test_compute_distribution_glucose(glucose_distribution):
    dist = glucose_distribution
    mono_p = 0.9893 ** 6 * 0.999885 ** 12 * 0.99757 ** 6
    assert np.isclose(dist.monoisotopic_mass, 180.0634, atol=1e-4)
    assert np.isclose(dist.average_mass, 180.156, atol=1e-3)
    assert dist.n_isotopologs > 1
    assert np.isclose(dist.monoisotopic_probability, mono_p)
    assert np.isclose(dist.abundance[0], mono_p)
    assert np.isclose(dist.mass[0], dist.monoisotopic_mass)
    assert dist.labels[0] == ""


def test_compute_distribution_sorted_by_abundance(glucose_distribution):
    dist = glucose_distribution
    assert np.all(np.diff(dist.abundance) <= 0)
    assert np.all(np.diff(dist.cumulative) >= 0)
    assert np.allclose(dist.cumulative, np.cumsum(dist.abundance))
    assert dist.cumulative[-1] <= 1.0 + 1e-12


def test_compute_distribution_numpy_scalar_params(glucose):
    dist = isotopologs.compute_distribution(glucose, cutoff=np.float32(1e-5),
                                            coverage=np.float64(0.99))
    expected = isotopologs.compute_distribution(glucose, cutoff=1e-5, coverage=0.99)
    assert dist.n_isotopologs == expected.n_isotopologs
    assert dist.coverage_count == expected.coverage_count


def test_compute_distribution_from_string():
    dist = isotopologs.compute_distribution("C 6 H 12 O 6")
    assert dist.composition == ElementComposition("C 6 H 12 O 6")


def test_compute_distribution_uses_a_copy_of_the_composition(glucose):
    dist = isotopologs.compute_distribution(glucose)
    glucose.add_atoms("C", 10)
    assert dist.composition.get_coefficient("C") == 6


@pytest.mark.parametrize("composition_str", ["C 2 H 6 O 1 S 1", "C 6 H 12 O 6", "Cl 3 Br 2"])
def test_compute_distribution_without_cutoff_is_normalized(composition_str):
    dist = isotopologs.compute_distribution(composition_str, cutoff=0.0)
    assert np.isclose(dist.abundance.sum(), 1.0)


def test_compute_distribution_binomial():
    n = 10
    dist = isotopologs.compute_distribution("C 10", cutoff=0.0)
    assert dist.n_isotopologs == n + 1
    for label, p in zip(dist.labels, dist.abundance):
        k = int(label.split(")")[1]) if label else 0
        assert np.isclose(p, binom.pmf(k, n, 0.0107))


def test_compute_distribution_monoisotopic_probability_underflow():
    # 0.9893 ** 80000 is lower than the smallest float
    n = 80000
    dist = isotopologs.compute_distribution("C {}".format(n))
    assert dist.monoisotopic_probability == 0.0
    assert dist.n_isotopologs > 0
    assert np.isclose(dist.abundance.sum(), 1.0, atol=1e-6)
    assert np.all(np.isfinite(dist.centroid_mass))
    mode = int(np.floor((n + 1) * 0.0107))
    assert dist.labels[0] == "(13C){}".format(mode)
    for label, p in zip(dist.labels[:5], dist.abundance[:5]):
        k = int(label.split(")")[1])
        assert np.isclose(p, binom.pmf(k, n, 0.0107))


def test_compute_distribution_multinomial_three_isotopes():
    # 18O and 17O share the atoms of the element
    n = 3
    dist = isotopologs.compute_distribution("O 3", cutoff=0.0)
    pmf = multinomial(n, [0.99757, 0.00205, 0.00038])
    expected = dict()
    for n18 in range(n + 1):
        for n17 in range(n + 1 - n18):
            tokens = list()
            if n18:
                tokens.append("(18O){}".format(n18))
            if n17:
                tokens.append("(17O){}".format(n17))
            expected[" ".join(tokens)] = pmf.pmf([n - n18 - n17, n18, n17])
    assert dist.n_isotopologs == len(expected)
    for label, p in zip(dist.labels, dist.abundance):
        assert np.isclose(p, expected[label])


def test_compute_distribution_four_isotopes_channels_share_atoms():
    dist = isotopologs.compute_distribution("S 2", cutoff=0.0)
    # number of ways of distributing 2 atoms into 4 isotopes
    assert dist.n_isotopologs == 10
    assert np.isclose(dist.abundance.sum(), 1.0)


def test_compute_distribution_no_channels():
    dist = isotopologs.compute_distribution("F 2 Na 1")
    assert dist.n_isotopologs == 1
    assert dist.labels[0] == ""
    assert dist.abundance[0] == 1.0
    assert dist.coverage_count == 1
    assert dist.centroid_population.tolist() == [1]


def test_compute_distribution_pseudo_element():
    dist = isotopologs.compute_distribution("*C 6", cutoff=0.0)
    assert np.isclose(dist.abundance[0], 0.99 ** 6)
    assert "12C" in dist.labels[1]
    # the reference isotope of *C is the heaviest
    assert dist.mass.max() == dist.mass[0]


def test_compute_distribution_cutoff_prunes_isotopologs(glucose):
    low = isotopologs.compute_distribution(glucose, cutoff=1e-8)
    high = isotopologs.compute_distribution(glucose, cutoff=1e-3)
    assert high.n_isotopologs < low.n_isotopologs
    assert np.all(high.abundance > 1e-3 * high.monoisotopic_probability)


def test_compute_distribution_cutoff_one_keeps_increasing_branches():
    # the monoisotopic isotopolog of C 200 is not the most probable one, the
    # branch is followed while the probability increases
    dist = isotopologs.compute_distribution("C 200", cutoff=1.0)
    assert dist.n_isotopologs > 1
    assert dist.abundance[0] > dist.monoisotopic_probability


@pytest.mark.parametrize("cutoff", [-0.1, 1.5])
def test_compute_distribution_invalid_cutoff(glucose, cutoff):
    with pytest.raises(ValueError):
        isotopologs.compute_distribution(glucose, cutoff=cutoff)


def test_compute_distribution_invalid_coverage(glucose):
    with pytest.raises(ValueError):
        isotopologs.compute_distribution(glucose, coverage=-0.5)


@pytest.mark.parametrize("coverage,expected", [[0.0, 1], [1e-6, 1], [2.0, None]])
def test_compute_distribution_coverage_bounds(glucose, coverage, expected):
    dist = isotopologs.compute_distribution(glucose, coverage=coverage)
    if expected is None:
        expected = dist.n_isotopologs
    assert dist.coverage_count == expected


def test_compute_distribution_coverage_count(glucose_distribution):
    dist = glucose_distribution
    k = dist.coverage_count
    assert dist.cumulative[k - 1] >= dist.coverage or k == dist.n_isotopologs
    if k > 1:
        assert dist.cumulative[k - 2] < dist.coverage


def test_IsotopologDistribution_get_brief(glucose_distribution):
    dist = glucose_distribution
    brief = dist.get_brief()
    n = dist.coverage_count
    assert brief.mass.size == n
    assert np.array_equal(brief.abundance, dist.abundance[:n])
    assert np.array_equal(brief.cumulative, dist.cumulative[:n])
    assert list(brief.labels) == list(dist.labels[:n])


def test_IsotopologDistribution_centroids(glucose_distribution):
    dist = glucose_distribution
    assert np.isclose(dist.centroid_abundance.sum(), dist.abundance.sum())
    assert dist.centroid_population.sum() == dist.n_isotopologs
    assert np.all(np.diff(dist.centroid_mass) > 0)
    # the first centroid contains only the monoisotopic isotopolog
    assert dist.centroid_population[0] == 1
    assert np.isclose(dist.centroid_mass[0], dist.monoisotopic_mass)


def test_IsotopologDistribution_centroid_empty_bins_are_dropped():
    # chlorine isotopes differ in 2 Da
    dist = isotopologs.compute_distribution("Cl 2", cutoff=0.0)
    assert dist.centroid_mass.size == 3
    assert dist.centroid_population.tolist() == [1, 1, 1]


def test_compute_distribution_is_deterministic(glucose):
    d1 = isotopologs.compute_distribution(glucose, cutoff=1e-7)
    d2 = isotopologs.compute_distribution(glucose, cutoff=1e-7)
    assert list(d1.labels) == list(d2.labels)
    assert np.array_equal(d1.mass, d2.mass)


def test_compute_distribution_equal_abundances_sorted_by_label():
    dist = isotopologs.compute_distribution("Br 1", cutoff=0.0)
    assert list(dist.labels) == ["", "(81Br)1"]
    table = dist.composition.table.with_abundances("Br", [0.5, 0.5])
    composition = ElementComposition("Br 1", table=table)
    dist = isotopologs.compute_distribution(composition, cutoff=0.0)
    assert list(dist.labels) == ["", "(81Br)1"]


def test_IsotopologDistribution_to_dataframe(glucose_distribution):
    df = glucose_distribution.to_dataframe()
    assert df.shape[0] == glucose_distribution.n_isotopologs
    assert list(df.columns) == ["mass", "abundance", "cumulative", "label"]
    df_brief = glucose_distribution.to_dataframe(brief=True)
    assert df_brief.shape[0] == glucose_distribution.coverage_count


def test_IsotopologDistribution_centroids_to_dataframe(glucose_distribution):
    df = glucose_distribution.centroids_to_dataframe()
    assert df.shape[0] == glucose_distribution.centroid_mass.size
    assert np.isclose(df["cumulative"].iloc[-1], glucose_distribution.abundance.sum())


def test_IsotopologDistribution_make_spectrum(glucose_distribution):
    sp = glucose_distribution.make_spectrum(mz_step=0.005, fwhm=0.05)
    assert isinstance(sp, Spectrum)
    mz_max, int_max = sp.get_max()
    assert int_max > 0.0
    assert abs(mz_max - glucose_distribution.monoisotopic_mass) < 0.01


def test_compute_distributions(glucose):
    compositions = [glucose, "C 2 H 6 O 1", "C 12 H 22 O 11"]
    results = isotopologs.compute_distributions(compositions, cutoff=1e-6, n_jobs=1)
    assert len(results) == len(compositions)
    for comp, res in zip(compositions, results):
        expected = isotopologs.compute_distribution(comp, cutoff=1e-6)
        assert np.allclose(res.mass, expected.mass)
        assert np.allclose(res.abundance, expected.abundance)


def test_compute_distributions_verbose(glucose):
    results = isotopologs.compute_distributions([glucose], verbose=True)
    assert len(results) == 1
