"""Tests for tool definitions, FunctionTool and the tool decorator."""

import pytest
from pydantic import BaseModel

from zai_lib_python.errors import InvalidParametersError, RegistrationError
from zai_lib_python.tools import FunctionTool, ToolMetadata, tool

WEATHER_SCHEMA = {
    "type": "object",
    "properties": {"city": {"type": "string"}, "days": {"type": "integer", "minimum": 1}},
    "required": ["city"],
}


class WeatherArgs(BaseModel):
    city: str
    days: int = 1


class Forecast(BaseModel):
    city: str
    temp_c: int


class TestToolMetadata:
    """Tests for ToolMetadata."""

    @pytest.mark.parametrize("name", ["get_weather", "a", "GetWeather2", "x" * 64, "y" * 200])
    def test_valid_names(self, name: str) -> None:
        assert ToolMetadata(name=name).name == name

    @pytest.mark.parametrize("name", ["", "has space", "点", "web-search", "a.b", "get_weather\n"])
    def test_invalid_names(self, name: str) -> None:
        with pytest.raises(RegistrationError):
            ToolMetadata(name=name)

    def test_tags_frozen(self) -> None:
        meta = ToolMetadata(name="t", tags={"io"})
        assert meta.tags == frozenset({"io"})

    def test_version_and_author_defaults(self) -> None:
        meta = ToolMetadata(name="t")
        assert meta.version == "1.0.0"
        assert meta.author is None


class TestFunctionTool:
    """Tests for FunctionTool."""

    def test_definition(self) -> None:
        weather = FunctionTool("get_weather", WEATHER_SCHEMA, lambda args: args, description="Weather")
        definition = weather.definition()
        assert definition.name == "get_weather"
        assert definition.description == "Weather"
        assert definition.function.parameters == WEATHER_SCHEMA

    def test_validate_ok(self) -> None:
        weather = FunctionTool("get_weather", WEATHER_SCHEMA, lambda args: args)
        weather.validate({"city": "Beijing", "days": 2})

    def test_validate_missing_required(self) -> None:
        weather = FunctionTool("get_weather", WEATHER_SCHEMA, lambda args: args)
        with pytest.raises(InvalidParametersError) as exc_info:
            weather.validate({"days": 2})
        assert "city" in exc_info.value.message

    def test_validate_reports_field(self) -> None:
        weather = FunctionTool("get_weather", WEATHER_SCHEMA, lambda args: args)
        with pytest.raises(InvalidParametersError) as exc_info:
            weather.validate({"city": "Beijing", "days": 0})
        assert exc_info.value.context.field_path == "days"

    def test_invalid_schema_rejected(self) -> None:
        with pytest.raises(RegistrationError):
            FunctionTool("broken", {"type": "not-a-type"}, lambda args: args)

    def test_handler_must_be_callable(self) -> None:
        with pytest.raises(RegistrationError):
            FunctionTool("broken", WEATHER_SCHEMA, "not callable")  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_invoke_sync_handler(self) -> None:
        weather = FunctionTool("get_weather", WEATHER_SCHEMA, lambda args: {"city": args["city"], "temp_c": 21})
        assert await weather.invoke({"city": "Beijing"}) == {"city": "Beijing", "temp_c": 21}

    @pytest.mark.asyncio
    async def test_invoke_async_handler(self) -> None:
        async def handler(args: dict) -> str:
            return f"sunny in {args['city']}"

        weather = FunctionTool("get_weather", WEATHER_SCHEMA, handler)
        assert await weather.invoke({"city": "Hangzhou"}) == "sunny in Hangzhou"

    @pytest.mark.asyncio
    async def test_model_result_dumped(self) -> None:
        weather = FunctionTool("get_weather", WEATHER_SCHEMA, lambda args: Forecast(city=args["city"], temp_c=3))
        assert await weather.invoke({"city": "Harbin"}) == {"city": "Harbin", "temp_c": 3}

    def test_version_and_author(self) -> None:
        weather = FunctionTool(
            "get_weather", WEATHER_SCHEMA, lambda args: args, version="2.1.0", author="weather-team"
        )
        assert weather.metadata.version == "2.1.0"
        assert weather.metadata.author == "weather-team"

    def test_hyphenated_name_rejected(self) -> None:
        with pytest.raises(RegistrationError):
            FunctionTool("get-weather", WEATHER_SCHEMA, lambda args: args)


class TestFromModel:
    """Tests for pydantic-typed handlers."""

    @pytest.mark.asyncio
    async def test_from_model(self) -> None:
        def get_weather(args: WeatherArgs) -> dict:
            """Current weather for a city.

            Longer description that is not sent.
            """
            return {"city": args.city, "days": args.days}

        weather = FunctionTool.from_model(get_weather, WeatherArgs)
        assert weather.name == "get_weather"
        assert weather.metadata.description == "Current weather for a city."
        assert weather.input_schema["required"] == ["city"]
        assert await weather.invoke({"city": "Xi'an"}) == {"city": "Xi'an", "days": 1}

    @pytest.mark.asyncio
    async def test_model_validation_error(self) -> None:
        weather = FunctionTool.from_model(lambda args: args, WeatherArgs, name="get_weather")
        with pytest.raises(InvalidParametersError) as exc_info:
            await weather.invoke({"city": "Xi'an", "days": "many"})
        assert exc_info.value.context.field_path == "days"


class TestToolDecorator:
    """Tests for the tool decorator."""

    @pytest.mark.asyncio
    async def test_decorator(self) -> None:
        @tool(description="Weather lookup", tags=["weather"], retry_safe=False)
        async def get_weather(args: WeatherArgs) -> Forecast:
            return Forecast(city=args.city, temp_c=18)

        assert isinstance(get_weather, FunctionTool)
        assert get_weather.name == "get_weather"
        assert get_weather.metadata.tags == frozenset({"weather"})
        assert not get_weather.metadata.retry_safe
        assert await get_weather.invoke({"city": "Chengdu"}) == {"city": "Chengdu", "temp_c": 18}

    def test_custom_name(self) -> None:
        @tool("weather_v2")
        def get_weather(args: WeatherArgs) -> str:
            return args.city

        assert get_weather.name == "weather_v2"

    def test_version_and_author(self) -> None:
        @tool(version="0.3.0", author="maps")
        def get_weather(args: WeatherArgs) -> str:
            return args.city

        assert get_weather.metadata.version == "0.3.0"
        assert get_weather.metadata.author == "maps"

    def test_requires_model_argument(self) -> None:
        with pytest.raises(RegistrationError):

            @tool()
            def untyped(args: dict) -> str:
                return ""
