"""Tests for configuration models, profiles, results and logging setup."""

import logging

import pytest
from pydantic import ValidationError

from pagedistill import Distiller
from pagedistill.errors import FailureReason, PipelineFailed
from pagedistill.filters import AGGRESSIVE_RULES, CODE_DOCS_RULES, SAFE_RULES
from pagedistill.logging_config import setup_logging, setup_logging_from_config
from pagedistill.models import (
    Block,
    BlockType,
    DistillConfig,
    FilterConfig,
    PipelineResult,
    PipelineStats,
    PipelineUsed,
    PostProcessConfig,
    ProfileName,
    ScoringConfig,
    Stage,
    TableData,
    TraceEvent,
    apply_profile,
)


class TestDistillConfig:
    """Tests for the root configuration model."""

    def test_defaults(self):
        """Test default values."""
        config = DistillConfig()

        assert config.profile == ProfileName.CUSTOM
        assert config.filters.safe_rules == SAFE_RULES
        assert config.scoring.prune_threshold == 0.0
        assert config.chunking.max_document_size == 1_000_000
        assert config.timeout_seconds is None

    def test_extra_fields_forbidden(self):
        """Test that unknown fields are rejected."""
        with pytest.raises(ValidationError):
            DistillConfig(unknown_field=1)

    def test_timeout_must_be_positive(self):
        """Test that a zero timeout is rejected."""
        with pytest.raises(ValidationError):
            DistillConfig(timeout_seconds=0)

    def test_nested_models_frozen(self):
        """Test that nested weight models are immutable."""
        config = ScoringConfig()

        with pytest.raises(ValidationError):
            config.text_cap = 10

    def test_filter_mode_selects_pass_two_rules(self):
        """Test that the filter mode picks the aggressive rule list."""
        assert FilterConfig().pass_two_rules() == AGGRESSIVE_RULES
        assert FilterConfig(mode="code_docs").pass_two_rules() == CODE_DOCS_RULES

        with pytest.raises(ValidationError):
            FilterConfig(mode="news")

    def test_yaml_round_trip(self):
        """Test YAML serialization and loading."""
        config = DistillConfig(
            profile=ProfileName.GITHUB,
            scoring=ScoringConfig(text_cap=2000),
            postprocess=PostProcessConfig(toc_title="Contents"),
        )

        loaded = DistillConfig.from_yaml(config.to_yaml())

        assert loaded.model_dump() == config.model_dump()
        assert loaded.scoring.text_cap == 2000
        assert loaded.filters.safe_rules == SAFE_RULES

    def test_yaml_partial(self):
        """Test that partial YAML fills in defaults."""
        config = DistillConfig.from_yaml("profile: obsidian\nscoring:\n  text_cap: 900\n")

        assert config.profile == ProfileName.OBSIDIAN
        assert config.scoring.text_cap == 900
        assert config.scoring.text_weight == 40.0

    def test_yaml_empty(self):
        """Test that empty YAML gives defaults."""
        assert DistillConfig.from_yaml("").profile == ProfileName.CUSTOM

    def test_yaml_file(self, tmp_path):
        """Test loading from a YAML file."""
        path = tmp_path / "distill.yaml"
        path.write_text("min_extracted_text: 50\n")

        assert DistillConfig.from_yaml_file(path).min_extracted_text == 50


class TestProfiles:
    """Tests for profile application."""

    def test_github_profile(self):
        """Test that the GitHub profile enables the TOC."""
        config = apply_profile(DistillConfig(profile=ProfileName.GITHUB))

        assert config.postprocess.platform == "github"
        assert config.postprocess.table_of_contents is True

    def test_obsidian_profile(self):
        """Test that the Obsidian profile uses obsidian formatting without TOC."""
        config = apply_profile(DistillConfig(profile=ProfileName.OBSIDIAN))

        assert config.postprocess.platform == "obsidian"
        assert config.postprocess.table_of_contents is False

    def test_user_values_win(self):
        """Test that explicit user values override profile defaults."""
        config = apply_profile(
            DistillConfig(
                profile=ProfileName.GITHUB,
                postprocess=PostProcessConfig(table_of_contents=False),
            )
        )

        assert config.postprocess.platform == "github"
        assert config.postprocess.table_of_contents is False

    def test_custom_profile_unchanged(self):
        """Test that the custom profile returns the config as is."""
        config = DistillConfig(postprocess=PostProcessConfig(platform="obsidian"))

        assert apply_profile(config) is config


class TestResultModels:
    """Tests for result and event serialization."""

    def test_block_to_dict_omits_unset(self):
        """Test that block dictionaries only carry relevant fields."""
        assert Block(type=BlockType.HEADING, level=2, text="T").to_dict() == {
            "type": "heading",
            "level": 2,
            "text": "T",
        }
        table = Block(type=BlockType.TABLE, table=TableData(headers=["a"], rows=[["1"]]))
        assert table.to_dict() == {"type": "table", "table": {"headers": ["a"], "rows": [["1"]]}}

    def test_result_to_dict(self):
        """Test pipeline result serialization."""
        result = PipelineResult(
            markdown="hi\n",
            blocks=[Block(type=BlockType.PARAGRAPH, text="hi")],
            pipeline_used=PipelineUsed.BYPASS,
            stats=PipelineStats(fallbacks_used=["whole-body"], quality_score=10),
        )

        data = result.to_dict()

        assert data["pipeline_used"] == "bypass"
        assert data["stats"] == {"fallbacks_used": ["whole-body"], "quality_score": 10}
        assert data["blocks"] == [{"type": "paragraph", "text": "hi"}]

    def test_trace_event(self):
        """Test trace event helpers."""
        event = TraceEvent(stage=Stage.FAILED, decision="parse", reason="Empty document")

        assert event.is_error is True
        assert event.to_dict()["stage"] == "failed"
        assert TraceEvent(stage=Stage.SCORING).is_error is False

    def test_error_string_includes_stage(self):
        """Test that errors name the stage they happened in."""
        error = PipelineFailed("boom", stage="converting")

        assert str(error) == "converting: boom"
        assert error.reason == FailureReason.INTERNAL


class TestLogging:
    """Tests for logging setup."""

    def test_setup_logging(self):
        """Test that the package logger is configured without propagation."""
        logger = setup_logging(level="WARNING", force=True)

        assert logger.name == "pagedistill"
        assert logger.level == logging.WARNING
        assert logger.propagate is False
        assert len(logger.handlers) == 1

    def test_log_file(self, tmp_path):
        """Test that a file handler is added when a log file is given."""
        log_file = tmp_path / "distill.log"

        logger = setup_logging(level="INFO", log_file=str(log_file), force=True)
        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        assert "hello" in log_file.read_text()
        setup_logging(force=True)

    def test_setup_from_config(self):
        """Test that config log level is applied."""
        logger = setup_logging_from_config(DistillConfig(log_level="DEBUG"))

        assert logger.level == logging.DEBUG
        setup_logging(force=True)

    def test_distiller_applies_logging_config(self, tmp_path):
        """Test that a Distiller can configure logging from its config."""
        log_file = tmp_path / "run.log"
        config = DistillConfig(log_level="WARNING", log_file=log_file)

        Distiller(config, configure_logging=True)
        logger = logging.getLogger("pagedistill")

        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 2
        setup_logging(force=True)
