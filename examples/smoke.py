import asyncio

import httpx

from model_router.context import EnvironmentKeys
from model_router.providers import gemini_provider, openai_provider
from model_router.router import ModelRouter


def fake_catalog(request: httpx.Request) -> httpx.Response:
    if "generativelanguage" in request.url.host:
        return httpx.Response(200, json={"models": [{"name": "models/gemini-2.0-flash"}]})
    return httpx.Response(200, json={"data": [{"id": "gpt-4.1-mini"}, {"id": "gpt-4.1"}]})


async def main() -> None:
    transport = httpx.MockTransport(fake_catalog)
    router = ModelRouter(
        [
            openai_provider(transport=transport),
            gemini_provider(mount="google", transport=transport),
        ],
        alias={"fast": "gpt-4.1-mini"},
    )
    keys = EnvironmentKeys({"OPENAI_KEY": "DUMMY", "GEMINI_KEY": "DUMMY"})

    handle = await router.resolve("fast", {"type": "llm"}, keys)
    request = await handle.exec({"messages": [{"role": "system", "content": "Be terse."}]})
    print(handle.source, request.url)
    print(request.body)

    listing = await router.resolve("google/gemini.*", {"match": "regex", "output": "all"}, keys)
    print(listing.names if listing is not None else "no gemini models")

    await router.aclose()


if __name__ == "__main__":
    asyncio.run(main())
