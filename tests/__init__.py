from ._RandomGenerator import RandomGenerator
from .helper import (
    dotproduct_adjointness_test,
    gram_test,
    linear_operator_unitary_test,
    operator_isometry_test,
)
