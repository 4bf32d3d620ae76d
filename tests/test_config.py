"""Tests for DescriptorMatchConfig."""

from pathlib import Path

import pytest

from dsg_lcd.matching import DescriptorMatchConfig, DescriptorScoreType


@pytest.fixture
def config_yaml(tmp_path: Path) -> Path:
    """Write a config file with root and leaf sections.

    Args:
        tmp_path: Pytest temporary directory fixture

    Returns:
        Path to YAML file
    """
    path = tmp_path / "lcd.yaml"
    path.write_text(
        "root:\n"
        "  type: cosine\n"
        "  min_time_separation_s: 25.0\n"
        "  min_score: 0.6\n"
        "  min_registration_score: 0.75\n"
        "  min_score_ratio: 0.9\n"
        "  min_match_separation_m: 2.5\n"
        "  max_registration_matches: 3\n"
        "leaf:\n"
        "  type: L1\n"
        "  min_time_separation_s: 25.0\n"
    )
    return path


class TestDescriptorMatchConfig:
    """Test suite for DescriptorMatchConfig."""

    def test_defaults(self):
        """Test default thresholds."""
        config = DescriptorMatchConfig()

        assert config.type is DescriptorScoreType.L1
        assert config.min_time_separation_s == 0.0
        assert config.min_score == 0.0
        assert config.max_registration_matches == 5

    def test_type_from_string(self):
        """Test that the score type may be given by name."""
        assert DescriptorMatchConfig(type="COSINE").type is DescriptorScoreType.COSINE
        assert DescriptorMatchConfig(type=" l1 ").type is DescriptorScoreType.L1

    def test_unknown_type(self):
        """Test that unknown score types are rejected."""
        with pytest.raises(ValueError, match="Unknown descriptor score type"):
            DescriptorMatchConfig(type="hamming")

    def test_frozen(self):
        """Test that config cannot be modified after creation."""
        config = DescriptorMatchConfig()

        with pytest.raises(AttributeError):
            config.min_score = 0.5

    @pytest.mark.parametrize(
        "field_name", ["min_score", "min_registration_score", "min_score_ratio"]
    )
    def test_score_out_of_range(self, field_name):
        """Test that score thresholds must lie in [0, 1]."""
        with pytest.raises(ValueError, match=field_name):
            DescriptorMatchConfig(**{field_name: 1.5})

    @pytest.mark.parametrize("field_name", ["min_time_separation_s", "min_match_separation_m"])
    def test_negative_separation(self, field_name):
        """Test that separations must be non-negative."""
        with pytest.raises(ValueError, match=field_name):
            DescriptorMatchConfig(**{field_name: -1.0})

    def test_negative_match_cap(self):
        """Test that the match cap must be non-negative."""
        with pytest.raises(ValueError, match="max_registration_matches"):
            DescriptorMatchConfig(max_registration_matches=-1)

    def test_from_dict_unknown_field(self):
        """Test that unknown fields are rejected."""
        with pytest.raises(ValueError, match="min_scor"):
            DescriptorMatchConfig.from_dict({"min_scor": 0.5})

    def test_from_yaml_section(self, config_yaml: Path):
        """Test loading a named section."""
        root = DescriptorMatchConfig.from_yaml(config_yaml, section="root")
        leaf = DescriptorMatchConfig.from_yaml(config_yaml, section="leaf")

        assert root == DescriptorMatchConfig(
            type=DescriptorScoreType.COSINE,
            min_time_separation_s=25.0,
            min_score=0.6,
            min_registration_score=0.75,
            min_score_ratio=0.9,
            min_match_separation_m=2.5,
            max_registration_matches=3,
        )
        assert leaf.type is DescriptorScoreType.L1
        assert leaf.min_time_separation_s == 25.0

    def test_from_yaml_top_level(self, tmp_path: Path):
        """Test loading a file that holds a single config."""
        path = tmp_path / "lcd.yaml"
        path.write_text("min_score: 0.4\n")

        assert DescriptorMatchConfig.from_yaml(path).min_score == 0.4

    def test_from_yaml_empty_file(self, tmp_path: Path):
        """Test that an empty file gives the defaults."""
        path = tmp_path / "lcd.yaml"
        path.write_text("")

        assert DescriptorMatchConfig.from_yaml(path) == DescriptorMatchConfig()

    def test_from_yaml_missing_file(self, tmp_path: Path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            DescriptorMatchConfig.from_yaml(tmp_path / "missing.yaml")

    def test_from_yaml_missing_section(self, config_yaml: Path):
        """Test that a missing section is reported."""
        with pytest.raises(ValueError, match="Section 'objects' not found"):
            DescriptorMatchConfig.from_yaml(config_yaml, section="objects")

    def test_from_yaml_not_a_mapping(self, tmp_path: Path):
        """Test that a non-mapping document is rejected."""
        path = tmp_path / "lcd.yaml"
        path.write_text("- 0.5\n- 0.6\n")

        with pytest.raises(ValueError, match="Invalid descriptor match config"):
            DescriptorMatchConfig.from_yaml(path)
