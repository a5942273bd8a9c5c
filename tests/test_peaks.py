import pandas as pd
import pytest

from fragtree.chem import Deviation
from fragtree.model import (
    ProcessedPeak, find_precursor_peak, normalize_peaks, peaks_from_dataframe, synthetic_precursor_peak
)


def test_normalize_sorts_and_scales():
    peaks = normalize_peaks([
        ProcessedPeak(0, 150.0, 50.0),
        ProcessedPeak(1, 100.0, 200.0),
    ])
    assert [p.index for p in peaks] == [1, 0]
    assert [p.relative_intensity for p in peaks] == [1.0, 0.25]


@pytest.mark.parametrize('peaks', [
    [ProcessedPeak(0, 100.0, 1.0), ProcessedPeak(0, 120.0, 1.0)],
    [ProcessedPeak(0, -1.0, 1.0)],
    [ProcessedPeak(0, 100.0, 1.0), ProcessedPeak(1, 101.0, 1.0, isotope_of=7, isotope_index=1)],
    [ProcessedPeak(0, 100.0, 1.0), ProcessedPeak(1, 101.0, 1.0, isotope_of=0, isotope_index=0)],
])
def test_invalid_peak_lists(peaks):
    with pytest.raises(ValueError):
        normalize_peaks(peaks)


def test_peaks_from_dataframe():
    df = pd.DataFrame({
        'index': [3, 8, 9],
        'mz': [120.0808, 121.0841, 166.0863],
        'intensity': [100.0, 8.7, 40.0],
        'isotope_of': [None, 3, None],
        'isotope_index': [None, 1, None],
    })
    peaks = peaks_from_dataframe(df)
    assert [p.index for p in peaks] == [3, 8, 9]
    assert peaks[1].is_isotope and peaks[1].isotope_of == 3 and peaks[1].isotope_index == 1
    assert not peaks[0].is_isotope
    assert peaks[2].relative_intensity == pytest.approx(0.4)


def test_peaks_from_dataframe_default_index_and_missing_columns():
    peaks = peaks_from_dataframe(pd.DataFrame({'mz': [200.0, 100.0], 'intensity': [1.0, 2.0]}))
    assert [p.index for p in peaks] == [1, 0]
    with pytest.raises(ValueError):
        peaks_from_dataframe(pd.DataFrame({'mz': [100.0]}))


def test_precursor_peak_lookup():
    peaks = normalize_peaks([
        ProcessedPeak(0, 166.0850, 10.0),
        ProcessedPeak(1, 166.0862, 10.0),
        ProcessedPeak(2, 166.0863, 10.0, isotope_of=0, isotope_index=1),
    ])
    assert find_precursor_peak(peaks, 166.0863, Deviation(10, 0.002)).index == 1
    assert find_precursor_peak(peaks, 180.0, Deviation(10, 0.002)) is None

    synthetic = synthetic_precursor_peak(peaks, 180.0)
    assert synthetic.index == 3
    assert synthetic.synthetic and synthetic.intensity == 0.0


def test_peaks_from_dataframe_rejects_blank_index():
    df = pd.DataFrame({'index': [0, None], 'mz': [100.0, 120.0], 'intensity': [1.0, 2.0]})
    with pytest.raises(ValueError, match='Row 1'):
        peaks_from_dataframe(df)
