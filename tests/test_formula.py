import pytest

from fragtree.chem import MolecularFormula, element_mass


def test_parse_and_hill_notation():
    f = MolecularFormula.parse('O2NC9H11')
    assert str(f) == 'C9H11NO2'
    assert f.number_of('C') == 9
    assert f.number_of('S') == 0
    assert f.as_dict() == {'C': 9, 'H': 11, 'N': 1, 'O': 2}


def test_hill_notation_without_carbon():
    assert str(MolecularFormula.parse('OH2')) == 'H2O'
    assert str(MolecularFormula.parse('H3O4P')) == 'H3O4P'


def test_repeated_elements_are_summed():
    assert MolecularFormula.parse('CH3CH2OH') == MolecularFormula.parse('C2H6O')


def test_monoisotopic_mass():
    assert element_mass('C') == pytest.approx(12.0)
    assert MolecularFormula.parse('C9H11NO2').mass == pytest.approx(165.078979, abs=1e-5)
    assert MolecularFormula.parse('H2O').mass == pytest.approx(18.010565, abs=1e-5)


@pytest.mark.parametrize('text', ['C9H11NO2x', 'c6h6', '6C', 'Xx2'])
def test_invalid_formulas_raise(text):
    with pytest.raises(ValueError):
        MolecularFormula.parse(text)


def test_arithmetic_and_subtraction_checks():
    phe = MolecularFormula.parse('C9H11NO2')
    formic_acid = MolecularFormula.parse('CH2O2')
    fragment = phe - formic_acid
    assert fragment == MolecularFormula.parse('C8H9N')
    assert fragment + formic_acid == phe
    assert phe.is_subtractable(fragment)
    assert not fragment.is_subtractable(phe)
    assert not (fragment - phe).is_all_positive_or_zero()


def test_empty_formula():
    empty = MolecularFormula.empty()
    assert empty.is_empty()
    assert empty.mass == 0
    assert str(empty) == ''
    assert MolecularFormula.parse('') == empty
    assert MolecularFormula.parse('C6H6').is_subtractable(empty)


def test_rdbe():
    assert MolecularFormula.parse('C6H6').rdbe() == 4
    assert MolecularFormula.parse('C9H11NO2').rdbe() == 5
    assert MolecularFormula.parse('C7H7').rdbe() == 4.5


def test_ordering_and_hashing():
    formulas = [MolecularFormula.parse(t) for t in ('C6H6', 'H2O', 'CO', 'C2H4')]
    assert [str(f) for f in sorted(formulas)] == ['H2O', 'CO', 'C2H4', 'C6H6']
    assert len({MolecularFormula.parse('CO'), MolecularFormula.parse('OC')}) == 1


def test_from_counts_drops_zero_counts():
    f = MolecularFormula.from_counts({'C': 2, 'H': 6, 'O': 1, 'N': 0})
    assert f == MolecularFormula.parse('C2H6O')
    assert f.elements() == ['C', 'H', 'O']
