"""
精度测试模块
提供定点数精度评估测试功能
"""

import pytest
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fixpt import FixedPoint, FixedPointFormat
from fixpt.base.constants import FIXED_POINT_FORMATS, MATH_CONSTANTS
from fixpt.evaluation import AccuracyMetrics, get_accuracy_evaluator, sample_values
from fixpt.number import OverflowKind, CollectingOverflowReporter, overflow_reporting


class TestLeibnizPi:
    """Leibniz 级数测试类"""

    def setup_method(self):
        """测试前准备"""
        self.accuracy_evaluator = get_accuracy_evaluator()

    def test_short_series(self):
        """测试十万项级数收敛"""
        pi, metrics = self.accuracy_evaluator.leibniz_pi(100000, tolerance=2e-5)

        # 结果保持累加器位宽
        assert type(pi) is FixedPoint[3, 32]
        assert isinstance(metrics, AccuracyMetrics)
        assert metrics.format_name == 'Q3_32'
        assert metrics.passed_threshold
        assert abs(pi.to_float() - MATH_CONSTANTS['PI']) == metrics.max_error

    def test_wraparound_cancels(self):
        """测试首项回绕在累加中抵消"""
        collector = CollectingOverflowReporter()
        with overflow_reporting(collector):
            pi, metrics = self.accuracy_evaluator.leibniz_pi(1000, tolerance=2e-3)

        assert metrics.passed_threshold
        assert 3.0 < pi.to_float() < 3.3

        # 首项 4 构造时上溢为 -4，减去第二项时累加器下溢回到范围内
        assert len(collector) == 2
        first, second = collector.events
        assert first.kind is OverflowKind.OVERFLOW
        assert first.format_name == 'Q3_30'
        assert first.before == "4 + 0/1073741824"
        assert first.after == "-4 + 0/1073741824"
        assert second.kind is OverflowKind.UNDERFLOW
        assert second.format_name == 'Q3_32'

    def test_too_few_terms_fails_threshold(self):
        """测试项数不足时精度不达标"""
        pi, metrics = self.accuracy_evaluator.leibniz_pi(10, tolerance=1e-6)
        assert not metrics.passed_threshold
        assert 3.0 < pi.to_float() < 3.3

    def test_invalid_terms(self):
        """测试非法项数"""
        with pytest.raises(ValueError):
            self.accuracy_evaluator.leibniz_pi(0)

    @pytest.mark.slow
    def test_full_series(self):
        """测试一千万项级数收敛到 1e-6 以内"""
        pi, metrics = self.accuracy_evaluator.leibniz_pi()
        assert metrics.passed_threshold
        assert abs(pi.to_float() - MATH_CONSTANTS['PI']) < 1e-6


class TestRoundTrip:
    """往返误差测试类"""

    def setup_method(self):
        """测试前准备"""
        self.accuracy_evaluator = get_accuracy_evaluator()

    @pytest.mark.parametrize("format_name", ['Q8_8', 'Q10_10', 'Q16_16', 'Q8_24'])
    def test_representable_values_exact(self, format_name):
        """测试可精确表示的值往返无误差"""
        values = sample_values(format_name, 200, seed=1, representable=True)
        metrics = self.accuracy_evaluator.round_trip(values, format_name)
        assert metrics.max_error == 0.0
        assert metrics.passed_threshold

    @pytest.mark.parametrize("format_name", FIXED_POINT_FORMATS)
    def test_uniform_values_within_resolution(self, format_name):
        """测试随机值往返误差不超过一个最小增量"""
        values = sample_values(format_name, 200, seed=2)
        metrics = self.accuracy_evaluator.round_trip(values, format_name)
        assert metrics.passed_threshold
        assert metrics.mean_error <= metrics.max_error

    def test_samples_in_range(self):
        """测试样本位于表示范围内"""
        fmt = FixedPointFormat.parse('Q4_4')
        values = sample_values(fmt, 500, seed=3, representable=True)
        assert values.dtype == np.float64
        assert values.min() >= fmt.min_value
        assert values.max() <= fmt.max_value
        assert np.all(values * fmt.denominator == np.floor(values * fmt.denominator))

    def test_empty_samples(self):
        """测试空样本"""
        with pytest.raises(ValueError):
            self.accuracy_evaluator.round_trip([], 'Q8_8')


if __name__ == '__main__':
    pytest.main([__file__])
