import pytest

pytest.importorskip("systest_missing_optional_dependency")
