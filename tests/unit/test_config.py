import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

from upload_validator.core.config import Settings
from upload_validator.core.config import settings
from upload_validator.core.validation import all_known_extensions
from upload_validator.models.upload_models import ValidationConfig


def test_settings_defaults():
    # Ensure default settings have expected types and default values
    assert isinstance(settings.upload_max_filesize, str)
    assert isinstance(settings.default_upload_dir, Path)
    assert Settings(_env_file=None).default_locale == "en"


def test_settings_environment_converts_shorthand():
    env = Settings(_env_file=None, upload_max_filesize="2M", post_max_size="512k").environment()
    assert env.upload_max_filesize == 2 * 1024 * 1024
    assert env.post_max_size == 512 * 1024


def test_settings_reject_bad_shorthand():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, post_max_size="lots")


def test_settings_cors_origins_from_comma_string(monkeypatch):
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "https://a.example, https://b.example")
    assert Settings(_env_file=None).cors_allowed_origins == ["https://a.example", "https://b.example"]


def test_settings_cors_single_origin_from_env(monkeypatch):
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "https://only.example")
    assert Settings(_env_file=None).cors_allowed_origins == ["https://only.example"]


def test_settings_cors_origins_as_list():
    assert Settings(_env_file=None, cors_allowed_origins=["https://a.example"]).cors_allowed_origins == ["https://a.example"]


def test_validation_config_defaults():
    config = ValidationConfig()
    assert config.max_file_size == 128000
    assert config.filename_max_length == 150
    assert (config.min_img_width, config.max_img_width) == (1, 5000)
    assert config.file_permissions == 0o775
    assert config.filename_sanitize and config.filename_validate
    assert not config.filename_img_dimensions
    assert config.upload_dir == str(settings.default_upload_dir)


@pytest.mark.parametrize("length", [-5, 0, 1, 19, 20])
def test_filename_max_length_floor(length):
    assert ValidationConfig(filename_max_length=length).filename_max_length == 20


def test_inverted_image_bounds_are_swapped():
    config = ValidationConfig(min_img_width=1600, max_img_width=1200, min_img_height=900)
    assert (config.min_img_width, config.max_img_width) == (1200, 1600)
    # max_img_height default (5000) is above 900: left alone
    assert (config.min_img_height, config.max_img_height) == (900, 5000)


def test_min_above_default_max_is_swapped():
    config = ValidationConfig(min_img_height=6000)
    assert (config.min_img_height, config.max_img_height) == (5000, 6000)


def test_allowed_types_expansion():
    assert ValidationConfig().allowed_extensions == all_known_extensions()
    assert ValidationConfig(allowed_file_types="images").allowed_extensions == ["gif", "png", "jpg", "jpeg"]
    assert ValidationConfig(allowed_file_types=[".PDF", " Txt "]).allowed_extensions == ["pdf", "txt"]


def test_unknown_category_is_rejected():
    with pytest.raises(ValidationError):
        ValidationConfig(allowed_file_types="spreadsheets")


def test_config_is_immutable():
    config = ValidationConfig()
    with pytest.raises(ValidationError):
        config.overwrite = True


def test_unknown_options_are_rejected():
    with pytest.raises(ValidationError):
        ValidationConfig(filename_maxlength=10)


def test_union_has_no_duplicates():
    extensions = all_known_extensions()
    assert len(extensions) == len(set(extensions))
    assert "wmv" in extensions and "pdf" in extensions


def test_system_temp_dir_is_default_destination():
    assert Settings(_env_file=None).default_upload_dir == Path(tempfile.gettempdir())


def test_policy_defaults_follow_process_settings(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "default_locale", "fr")
    monkeypatch.setattr(settings, "default_upload_dir", tmp_path)

    config = ValidationConfig()

    assert config.locale == "fr"
    assert config.upload_dir == str(tmp_path)
