import pytest

from upload_validator.models.upload_models import UploadEnvironment
from upload_validator.services.limits import effective_max_file_size

ENV = UploadEnvironment(upload_max_filesize=2 * 1024 * 1024, post_max_size=8 * 1024 * 1024)


def test_policy_ceiling_governs_when_smallest():
    assert effective_max_file_size(ENV, 128000) == 128000


@pytest.mark.parametrize("policy", [0, -1])
def test_non_positive_policy_defers_to_runtime(policy):
    assert effective_max_file_size(ENV, policy) == 2 * 1024 * 1024


def test_request_limit_can_govern():
    env = UploadEnvironment(upload_max_filesize=10_000_000, post_max_size=5_000_000)
    assert effective_max_file_size(env, 0) == 5_000_000


def test_client_hint_can_only_lower_the_limit():
    assert effective_max_file_size(ENV, 128000, "50000") == 50000
    assert effective_max_file_size(ENV, 128000, "999999999") == 128000
    assert effective_max_file_size(ENV, 128000, 1000) == 1000


@pytest.mark.parametrize("hint", ["-5", "12.5", "1e6", "abc", "", " 100", "١٢٣"])
def test_client_hint_must_be_an_integer_literal(hint):
    assert effective_max_file_size(ENV, 128000, hint) == 128000
