import pytest

from simuro_core.config.enums import Side


def pytest_addoption(parser):
    parser.addoption(
        "--level",
        action="store",
        default="full",
        choices=["quick", "full"],
        help="Set the testing level: 'quick' or 'full'.",
    )


# These parameter names match up with the parameter names for
# test functions (that is functions with the word test in the name
# in files with the word test in the name) detected by pytest,
# and we test such functions with all values in the below sets
# For example, a function with the parameter name side
# will be tested once with Side.BLUE and once with Side.YELLOW.
# Notice that the key type for this dictionary is a tuple
# which allows aliasing such that multiple parameter names share the same
# test value sets.
parameter_values = {
    ("side",): {  # Probably worth running both colours even in quick mode
        "quick": [Side.BLUE, Side.YELLOW],
        "full": [Side.BLUE, Side.YELLOW],
    },
    ("seed",): {
        "quick": range(0, 2),
        "full": range(0, 10),
    },
}


def pytest_generate_tests(metafunc):
    for param_set, cases in parameter_values.items():
        for param in param_set:
            if param in metafunc.fixturenames:
                metafunc.parametrize(param, cases[metafunc.config.getoption("level")])
