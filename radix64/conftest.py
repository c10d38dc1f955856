# This file is used to configure the behavior of pytest.
import numpy as np

try:
    from .version import version
except ImportError:  # Can happen in source checkout.
    version = 'from source'


def pytest_report_header(config):
    # Version numbers of the packages the tests depend on.
    return [f'radix64: {version}', f'Numpy: {np.__version__}']
