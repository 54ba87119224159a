"""Codemode quickstart: run one program in a sandbox, then ask the agent."""

import asyncio

from codemode import Settings, create_agent, create_executor

PROGRAM = """
const res = await fetch("https://jsonplaceholder.typicode.com/posts?_limit=3");
const posts = await res.json();
console.log(JSON.stringify({ ok: true, titles: posts.map((p) => p.title) }));
"""


async def main():
    settings = Settings.from_env()

    result = await create_executor(settings).execute(PROGRAM)
    print(f"Success: {result.ok}")
    print(f"Result: {result.result_value or result.error_message}")

    agent = create_agent(settings)
    reply = await agent.generate(
        "What's the current temperature in Oslo?",
        thread_id="quickstart",
        resource_id="me",
    )
    print(f"\n{reply.text}")


asyncio.run(main())
