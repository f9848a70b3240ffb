import httpx
import pytest

from conftest import ALL_KEYS
from providers.errors import MalformedResponse, MissingCredential, ProviderError, TransportError, UnknownProvider
from providers.registry import DEFAULT_PRIORITY, ProviderRegistry, parse_priority
from providers.types import PromptRequest


def _req(text="hi", creativity=70):
    return PromptRequest(prompt=text, raw_prompt=text, creativity=creativity, max_tokens=50)


def test_registry_init_without_keys():
    r = ProviderRegistry({})
    assert r.priority == DEFAULT_PRIORITY
    assert r.enabled_providers() == []
    assert r.get("openai") is not None
    assert all(not s["configured"] for s in r.status())


def test_registry_reads_keys_models_and_priority():
    r = ProviderRegistry({
        "OPENAI_KEY": "legacy",
        "HF_TOKEN": "hf",
        "COHERE_MODEL": "command-r",
        "PROVIDER_PRIORITY": "huggingface, openai, bogus, openai",
    })
    assert r.priority == ("huggingface", "openai")
    assert r.enabled_providers() == ["huggingface", "openai"]
    assert r.descriptor("cohere").model == "command-r"
    assert r.descriptor("openai").api_key == "legacy"
    # keys are never part of the status report
    assert "legacy" not in str(r.status())


def test_registry_unknown_provider():
    r = ProviderRegistry({})
    with pytest.raises(UnknownProvider):
        r.get("mistral")
    with pytest.raises(KeyError):
        r.descriptor("mistral")


def test_parse_priority_falls_back_to_default():
    assert parse_priority("") == DEFAULT_PRIORITY
    assert parse_priority("nope") == DEFAULT_PRIORITY
    assert parse_priority("Gemini") == ("gemini",)


def test_descriptor_is_immutable():
    d = ProviderRegistry(ALL_KEYS).descriptor("openrouter")
    with pytest.raises(Exception):
        d.api_key = "other"  # type: ignore[misc]
    with pytest.raises(TypeError):
        d.extra_headers["X-Title"] = "x"  # type: ignore[index]


@pytest.mark.asyncio
async def test_disabled_without_key(make_registry, upstream):
    r = make_registry({})
    with pytest.raises(MissingCredential):
        await r.get("gemini").generate(r.descriptor("gemini"), _req())
    assert upstream.calls == []


@pytest.mark.asyncio
async def test_openai_request_shape(make_registry, upstream):
    upstream.reply("openai", "  hello  ")
    r = make_registry()
    reply = await r.get("openai").generate(r.descriptor("openai"), _req("say hi", creativity=30))
    assert reply.text == "hello"
    assert reply.provider == "openai"
    _, request = upstream.calls[0]
    assert request.url.path == "/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-openai"
    body = upstream.body()
    assert body["messages"] == [{"role": "user", "content": "say hi"}]
    assert body["temperature"] == pytest.approx(0.3)
    assert body["max_tokens"] == 50


@pytest.mark.asyncio
async def test_openrouter_sends_extra_headers(make_registry, upstream):
    upstream.reply("openrouter", "ok")
    r = make_registry()
    await r.get("openrouter").generate(r.descriptor("openrouter"), _req())
    _, request = upstream.calls[0]
    assert request.url.path == "/api/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-or"
    assert "HTTP-Referer" in request.headers
    assert request.headers["X-Title"]


@pytest.mark.asyncio
async def test_gemini_uses_query_key(make_registry, upstream):
    upstream.reply("gemini", "bonjour")
    r = make_registry()
    reply = await r.get("gemini").generate(r.descriptor("gemini"), _req("hello"))
    assert reply.text == "bonjour"
    _, request = upstream.calls[0]
    assert request.url.params["key"] == "g-key"
    assert request.url.path.endswith(":generateContent")
    assert "Authorization" not in request.headers
    body = upstream.body()
    assert body["contents"][0]["parts"][0]["text"] == "hello"
    assert body["generationConfig"]["temperature"] == pytest.approx(0.7)


@pytest.mark.asyncio
async def test_cohere_and_huggingface_shapes(make_registry, upstream):
    upstream.reply("cohere", "from cohere")
    upstream.reply("huggingface", "from hf")
    r = make_registry()
    c = await r.get("cohere").generate(r.descriptor("cohere"), _req("p1", creativity=0))
    h = await r.get("huggingface").generate(r.descriptor("huggingface"), _req("p2", creativity=0))
    assert (c.text, h.text) == ("from cohere", "from hf")
    assert upstream.calls[0][1].url.path == "/v1/generate"
    assert upstream.body(0)["prompt"] == "p1"
    assert upstream.calls[1][1].url.path.startswith("/models/")
    hf_body = upstream.body(1)
    assert hf_body["inputs"] == "p2"
    assert hf_body["parameters"]["temperature"] > 0
    assert hf_body["parameters"]["return_full_text"] is False


@pytest.mark.asyncio
async def test_non_2xx_is_transport_error(make_registry, upstream):
    upstream.fail("openai", status=429, body={"error": {"message": "rate limited"}})
    r = make_registry()
    with pytest.raises(TransportError) as ei:
        await r.get("openai").generate(r.descriptor("openai"), _req())
    assert ei.value.status_code == 429
    assert "rate limited" in ei.value.message


@pytest.mark.asyncio
async def test_error_payload_is_provider_error(make_registry, upstream):
    upstream.raw("huggingface", 200, {"error": "Model is currently loading"})
    r = make_registry()
    with pytest.raises(ProviderError):
        await r.get("huggingface").generate(r.descriptor("huggingface"), _req())


@pytest.mark.asyncio
async def test_missing_or_empty_text_is_malformed(make_registry, upstream):
    upstream.raw("cohere", 200, {"generations": []})
    upstream.reply("gemini", "   ")
    upstream.raw("openai", 200, text="not json")
    r = make_registry()
    for name in ("cohere", "gemini", "openai"):
        with pytest.raises(MalformedResponse):
            await r.get(name).generate(r.descriptor(name), _req())


@pytest.mark.asyncio
async def test_network_failures_are_transport_errors(make_registry, upstream):
    upstream.raise_("openai", httpx.ConnectError)
    upstream.raise_("cohere", httpx.ReadTimeout)
    r = make_registry()
    with pytest.raises(TransportError):
        await r.get("openai").generate(r.descriptor("openai"), _req())
    with pytest.raises(TransportError) as ei:
        await r.get("cohere").generate(r.descriptor("cohere"), _req())
    assert "timed out" in ei.value.message
