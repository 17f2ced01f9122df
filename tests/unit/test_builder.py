"""Unit tests for ExporterBuilder."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest
import requests
from opentelemetry.exporter.otlp.proto.http import Compression

from langfuse_exporter import (
    ConfigurationError,
    ExporterBuilder,
    InvalidEndpoint,
    InvalidTimeout,
    LangfuseSpanExporter,
    MissingCredentials,
    UnsupportedCompression,
)
from tests.fakes import FakeSession

BASIC_PK_SK = "Basic cGs6c2s="


@pytest.mark.unit
class TestFromEnvironment:
    """Tests for seeding a builder from the environment."""

    def test_langfuse_variables(self, langfuse_env: dict[str, str]) -> None:
        """
        GIVEN LANGFUSE_HOST=https://example.com, LANGFUSE_PUBLIC_KEY=pk and
              LANGFUSE_SECRET_KEY=sk
        WHEN the builder resolves
        THEN the endpoint and Authorization header derive from them
        """
        config = ExporterBuilder.from_environment().resolve()

        assert config.endpoint == "https://example.com/api/public/otel/v1/traces"
        assert config.authorization == BASIC_PK_SK

    def test_explicit_host_overrides_environment(
        self, langfuse_env: dict[str, str]
    ) -> None:
        """
        GIVEN a builder seeded from the environment
        WHEN with_host() is called before resolving
        THEN the endpoint derives from the explicit host
        """
        config = (
            ExporterBuilder.from_environment()
            .with_host("https://override.example")
            .resolve()
        )

        assert config.endpoint == "https://override.example/api/public/otel/v1/traces"
        assert config.authorization == BASIC_PK_SK

    def test_environment_captured_at_creation(
        self, monkeypatch: pytest.MonkeyPatch, langfuse_env: dict[str, str]
    ) -> None:
        """
        GIVEN a builder created with from_environment()
        WHEN the environment changes afterwards
        THEN the builder still resolves against the captured values
        """
        builder = ExporterBuilder.from_environment()
        monkeypatch.setenv("LANGFUSE_HOST", "https://changed.example")

        assert builder.resolve().endpoint.startswith("https://example.com/")

    def test_plain_builder_reads_environment_at_resolve(
        self, monkeypatch: pytest.MonkeyPatch, langfuse_env: dict[str, str]
    ) -> None:
        builder = ExporterBuilder()
        monkeypatch.setenv("LANGFUSE_HOST", "https://changed.example")

        assert builder.resolve().endpoint.startswith("https://changed.example/")

    def test_explicit_environ_mapping(self) -> None:
        config = ExporterBuilder.from_environment(
            {
                "OTEL_EXPORTER_OTLP_ENDPOINT": "https://h/api/public/otel",
                "LANGFUSE_PUBLIC_KEY": "pk",
                "LANGFUSE_SECRET_KEY": "sk",
            }
        ).resolve()

        assert config.endpoint == "https://h/api/public/otel/v1/traces"

    def test_langfuse_host_beats_otlp_endpoint(
        self, monkeypatch: pytest.MonkeyPatch, langfuse_env: dict[str, str]
    ) -> None:
        monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "https://collector:4318")

        config = ExporterBuilder.from_environment().resolve()

        assert config.endpoint == "https://example.com/api/public/otel/v1/traces"


@pytest.mark.unit
class TestExplicitSettings:
    """Tests for the fluent setters."""

    def test_setters_chain(self) -> None:
        session = requests.Session()

        config = (
            ExporterBuilder()
            .with_host("https://h.example")
            .with_credentials("pk", "sk")
            .with_header("x-team", "obs")
            .with_headers({"x-region": "eu"})
            .with_timeout(timedelta(seconds=30))
            .with_compression("gzip")
            .with_http_client(session)
            .resolve()
        )

        assert config.endpoint == "https://h.example/api/public/otel/v1/traces"
        assert config.headers["x-team"] == "obs"
        assert config.headers["x-region"] == "eu"
        assert config.timeout == 30.0
        assert config.compression is Compression.Gzip
        assert config.session is session

    def test_with_endpoint_used_verbatim(self) -> None:
        """
        GIVEN a custom collector URL that already carries its full path
        WHEN it is set with with_endpoint()
        THEN the resolved endpoint is exactly that URL
        """
        url = "https://collector.example.com/custom/v1/traces"

        config = ExporterBuilder().with_endpoint(url).with_credentials("pk", "sk").resolve()

        assert config.endpoint == url

    def test_with_endpoint_beats_environment(
        self, langfuse_env: dict[str, str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT", "https://otel.example/v1/traces")

        config = ExporterBuilder().with_endpoint("https://proxy.example/v1/traces").resolve()

        assert config.endpoint == "https://proxy.example/v1/traces"

    @pytest.mark.parametrize(
        ("first", "second", "expected"),
        [
            (
                ("with_host", "https://h.example"),
                ("with_endpoint", "https://collector.example/v1/traces"),
                "https://collector.example/v1/traces",
            ),
            (
                ("with_endpoint", "https://collector.example/v1/traces"),
                ("with_host", "https://h.example"),
                "https://h.example/api/public/otel/v1/traces",
            ),
        ],
    )
    def test_last_of_host_and_endpoint_wins(
        self, first: tuple[str, str], second: tuple[str, str], expected: str
    ) -> None:
        builder = ExporterBuilder().with_credentials("pk", "sk")
        getattr(builder, first[0])(first[1])
        getattr(builder, second[0])(second[1])

        assert builder.resolve().endpoint == expected

    def test_key_pair_beats_authorization_header(self) -> None:
        """
        GIVEN both an explicit key pair and an explicit Authorization header
        WHEN the builder resolves
        THEN the Authorization header derives from the key pair
        """
        config = (
            ExporterBuilder()
            .with_header("Authorization", "Bearer token")
            .with_credentials("pk", "sk")
            .resolve()
        )

        assert config.authorization == BASIC_PK_SK

    def test_authorization_header_alone_is_enough(self) -> None:
        config = ExporterBuilder().with_header("authorization", "Basic abc").resolve()

        assert config.authorization == "Basic abc"

    def test_split_key_setters(self) -> None:
        config = ExporterBuilder().with_public_key("pk").with_secret_key("sk").resolve()

        assert config.authorization == BASIC_PK_SK

    def test_basic_auth_alias(self) -> None:
        config = ExporterBuilder().with_basic_auth("pk", "sk").resolve()

        assert config.authorization == BASIC_PK_SK

    def test_setters_never_raise(self) -> None:
        """
        GIVEN invalid values passed to setters
        WHEN the setters are called
        THEN nothing is raised until resolve()
        """
        builder = ExporterBuilder().with_host("not a url").with_timeout(-1)

        with pytest.raises(ConfigurationError):
            builder.resolve()

    def test_raw_config_is_a_copy(self) -> None:
        builder = ExporterBuilder().with_header("x-a", "1")

        builder.raw_config.headers["x-b"] = "2"

        assert "x-b" not in builder.raw_config.headers


@pytest.mark.unit
class TestBuildErrors:
    """Configuration errors surface at build time."""

    def test_no_credentials(self) -> None:
        with pytest.raises(MissingCredentials):
            ExporterBuilder().build()

    def test_invalid_host(self) -> None:
        with pytest.raises(InvalidEndpoint):
            ExporterBuilder().with_host("ftp://h").with_credentials("pk", "sk").build()

    def test_invalid_timeout(self) -> None:
        with pytest.raises(InvalidTimeout):
            ExporterBuilder().with_credentials("pk", "sk").with_timeout(0).build()

    def test_invalid_env_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OTEL_EXPORTER_OTLP_TIMEOUT", "soon")

        with pytest.raises(InvalidTimeout, match="OTEL_EXPORTER_OTLP_TIMEOUT"):
            ExporterBuilder().with_credentials("pk", "sk").build()

    def test_unsupported_compression(self) -> None:
        with pytest.raises(UnsupportedCompression):
            ExporterBuilder().with_credentials("pk", "sk").with_compression("zstd").build()


@pytest.mark.unit
class TestBuild:
    """Tests for building the exporter."""

    def test_builds_exporter(self) -> None:
        exporter = ExporterBuilder().with_credentials("pk", "sk").build()

        assert isinstance(exporter, LangfuseSpanExporter)
        assert exporter.endpoint == "https://cloud.langfuse.com/api/public/otel/v1/traces"

    def test_default_http_client_provisioned(self) -> None:
        exporter = ExporterBuilder().with_credentials("pk", "sk").build()

        assert isinstance(exporter.config.session, requests.Session)

    def test_custom_http_client_used(self, fake_session: FakeSession) -> None:
        exporter = (
            ExporterBuilder()
            .with_credentials("pk", "sk")
            .with_http_client(fake_session)
            .build()
        )

        assert exporter.config.session is fake_session

    def test_builders_are_independent(self) -> None:
        first = ExporterBuilder().with_host("https://a.example").with_credentials("pk", "sk")
        second = ExporterBuilder().with_host("https://b.example").with_credentials("pk", "sk")

        assert first.resolve().endpoint.startswith("https://a.example/")
        assert second.resolve().endpoint.startswith("https://b.example/")


@pytest.mark.unit
class TestFromConfigFile:
    """Tests for seeding a builder from a YAML file."""

    def test_file_values_resolve(self, valid_config_file: Path) -> None:
        config = ExporterBuilder.from_config_file(valid_config_file).resolve()

        assert config.endpoint == "https://langfuse.example.com/api/public/otel/v1/traces"
        assert config.timeout == 30.0
        assert config.compression is Compression.Gzip
        assert config.headers["x-langfuse-sdk-name"] == "tests"

    def test_setters_override_file(self, valid_config_file: Path) -> None:
        config = (
            ExporterBuilder.from_config_file(valid_config_file)
            .with_host("https://override.example")
            .resolve()
        )

        assert config.endpoint.startswith("https://override.example/")

    def test_file_values_beat_environment(
        self, valid_config_file: Path, langfuse_env: dict[str, str]
    ) -> None:
        config = ExporterBuilder.from_config_file(valid_config_file).resolve()

        assert config.endpoint.startswith("https://langfuse.example.com/")
        assert config.authorization != BASIC_PK_SK

    def test_substitution_uses_environ_mapping(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """
        GIVEN a config file referencing ${VAR} and an explicit environ mapping
        WHEN the builder is created from the file with that mapping
        THEN substitution reads the mapping, not the process environment
        """
        monkeypatch.setenv("LF_HOST", "https://process.example")
        config_path = tmp_path / "langfuse.yaml"
        config_path.write_text(
            "host: ${LF_HOST}\npublic_key: pk\nsecret_key: sk\n"
        )

        config = ExporterBuilder.from_config_file(
            config_path, environ={"LF_HOST": "https://mapping.example"}
        ).resolve()

        assert config.endpoint == "https://mapping.example/api/public/otel/v1/traces"

    def test_endpoint_from_file_used_verbatim(self, tmp_path: Path) -> None:
        config_path = tmp_path / "langfuse.yaml"
        config_path.write_text(
            "endpoint: https://collector.example.com/custom/v1/traces\n"
            "public_key: pk\nsecret_key: sk\n"
        )

        config = ExporterBuilder.from_config_file(config_path).resolve()

        assert config.endpoint == "https://collector.example.com/custom/v1/traces"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            ExporterBuilder.from_config_file(tmp_path / "missing.yaml")
