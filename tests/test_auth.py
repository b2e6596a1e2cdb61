import pytest

from airedge.auth import JWTGenerator, MockJWTGenerator


def test_mock_token_format():
    generator = MockJWTGenerator("secret")
    assert generator.generate("health") == "health:secret"
    assert generator.generate("worker/hello") == "worker/hello:secret"


def test_mock_token_includes_method_and_secret():
    generator = MockJWTGenerator("token")
    method, _, tail = generator.generate("jobs/fetch/host").rpartition(":")
    assert method == "jobs/fetch/host"
    assert tail == "token"


def test_repr_hides_secret():
    assert "secret" not in repr(MockJWTGenerator("secret"))


def test_abstract_generator_cannot_be_built():
    with pytest.raises(TypeError):
        JWTGenerator()