#!/usr/bin/env python3
"""
Tool calling example.

Registers two tools, lets the model call them and feeds the results
back until it answers in plain text.

Usage:
    export ZAI_API_KEY="your-api-key"
    python examples/tool_calling.py
"""

import asyncio

from pydantic import BaseModel, Field

from zai_lib_python import (
    ExecutionConfig,
    Message,
    MetricsCollector,
    ToolCallCache,
    ToolExecutor,
    ToolRegistry,
    ZaiClient,
    tool,
)


class WeatherArgs(BaseModel):
    location: str = Field(description="City name, e.g. Beijing")
    unit: str = Field(default="celsius", description="Temperature unit")


@tool(description="Get the current weather for a location", version="1.1.0")
async def get_weather(args: WeatherArgs) -> dict:
    # Pretend to call a weather service
    return {"location": args.location, "temperature": 22, "unit": args.unit, "sky": "sunny"}


def search_database(params: dict) -> list[str]:
    return [f"Result {i} for {params['query']}" for i in range(params.get("limit", 2))]


async def main() -> None:
    """Run tool calling example."""
    registry = ToolRegistry()
    registry.add(get_weather)
    registry.register(
        "search_database",
        {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "The search query"},
                "limit": {"type": "integer", "description": "Maximum number of results"},
            },
            "required": ["query"],
        },
        search_database,
        description="Search the knowledge database for information",
        author="data-team",
    )
    metrics = MetricsCollector()
    executor = ToolExecutor(
        registry,
        ExecutionConfig(timeout=10, max_retries=2),
        cache=ToolCallCache(),
        metrics=metrics,
    )

    async with ZaiClient() as client:
        chat = client.chat(
            "glm-4.6",
            [Message.user("What's the weather like in Beijing, and what do we know about it?")],
            executor=executor,
        )
        result = await chat.run(max_rounds=4)

        for number, tool_round in enumerate(result.rounds, 1):
            for call, outcome in zip(tool_round.calls, tool_round.results):
                status = "ok" if outcome.success else f"failed: {outcome.error}"
                print(f"Round {number}: {call.name}({call.arguments}) -> {status}")

        print(f"\nFinal answer: {result.content}")
        if not result.completed:
            print("(stopped at the round limit)")

    report = metrics.generate_report()
    for name, tool_metrics in sorted(report.tool_metrics.items()):
        print(
            f"{name}: {tool_metrics.total_executions} calls, "
            f"{tool_metrics.success_rate:.0%} ok, {tool_metrics.average_duration * 1000:.1f} ms avg"
        )


if __name__ == "__main__":
    asyncio.run(main())
