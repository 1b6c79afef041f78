"""
hypothesis를 활용한 scoring 모듈 테스트

이 모듈은 제한된 랜덤 워크의 밴드 불변식을 검증합니다.
"""

import random
from hypothesis import given, strategies as st

from touristsafe.core.models import SafetyMetrics
from touristsafe.core.scoring import (
    METRIC_BANDS, RandomWalkTelemetry, clamp_metrics, derive_overall, random_walk_step,
)


@st.composite
def metrics_in_bands(draw):
    """밴드 안의 지표 생성"""
    return SafetyMetrics(**{
        name: draw(st.floats(min_value=band.floor, max_value=band.ceiling))
        for name, band in METRIC_BANDS.items()
    })


class TestRandomWalk:
    """랜덤 워크 테스트"""

    def test_bands(self):
        """지표별 밴드 상수 테스트"""
        assert (METRIC_BANDS["overall"].floor, METRIC_BANDS["overall"].delta) == (60, 10)
        assert (METRIC_BANDS["location"].floor, METRIC_BANDS["location"].delta) == (70, 8)
        assert (METRIC_BANDS["connectivity"].floor, METRIC_BANDS["connectivity"].delta) == (80, 5)
        assert (METRIC_BANDS["emergency_readiness"].floor, METRIC_BANDS["emergency_readiness"].delta) == (60, 12)
        assert all(band.ceiling == 100 for band in METRIC_BANDS.values())

    @given(metrics_in_bands(), st.integers(min_value=0, max_value=2**32 - 1))
    def test_step_stays_in_band_and_within_delta(self, prev, seed):
        """한 번의 tick은 밴드 안에 있고 변동폭은 delta/2 이하"""
        rng = random.Random(seed)
        for name, band in METRIC_BANDS.items():
            before = getattr(prev, name)
            after = random_walk_step(before, band, rng)
            assert band.floor <= after <= band.ceiling
            assert abs(after - before) <= band.delta / 2 + 1e-9

    @given(st.integers(min_value=0, max_value=2**32 - 1))
    def test_many_ticks_stay_in_bands(self, seed):
        """여러 tick 후에도 밴드 유지"""
        telemetry = RandomWalkTelemetry(random.Random(seed))
        metrics = SafetyMetrics()
        for _ in range(50):
            metrics = telemetry.next_metrics(metrics)
            for name, band in METRIC_BANDS.items():
                assert band.floor <= getattr(metrics, name) <= band.ceiling

    def test_seed_is_reproducible(self):
        """같은 시드는 같은 결과"""
        a = RandomWalkTelemetry(random.Random(7)).next_metrics(SafetyMetrics())
        b = RandomWalkTelemetry(random.Random(7)).next_metrics(SafetyMetrics())
        assert a == b


class TestDerivedOverall:
    """overall 파생 계산 테스트"""

    def test_mean_of_sub_metrics(self):
        """세부 지표의 균등 평균"""
        metrics = SafetyMetrics(overall=60, location=90, connectivity=90, emergency_readiness=90)
        assert derive_overall(metrics) == 90

    @given(metrics_in_bands(), st.integers(min_value=0, max_value=1000))
    def test_derived_overall_in_band(self, prev, seed):
        """파생 overall도 overall 밴드 안"""
        telemetry = RandomWalkTelemetry(random.Random(seed), derive_overall=True)
        nxt = telemetry.next_metrics(prev)
        assert 60 <= nxt.overall <= 100
        assert nxt.overall == derive_overall(nxt)


class TestClampMetrics:
    """지표 제한 테스트"""

    def test_out_of_band_values_are_clamped(self):
        """밴드 밖 값은 경계로 제한"""
        clamped = clamp_metrics(SafetyMetrics(overall=10, location=150, connectivity=0, emergency_readiness=70))
        assert clamped.overall == 60
        assert clamped.location == 100
        assert clamped.connectivity == 80
        assert clamped.emergency_readiness == 70

    def test_rounded_for_display(self):
        """표시용 정수 반올림"""
        assert SafetyMetrics(overall=84.6).rounded()["overall"] == 85
