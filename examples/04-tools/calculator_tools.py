"""Assistant Tools Example.

Methods marked with ``@tool`` are offered to the model; the assistant runs
the request / execute / respond loop until the model answers.

Features demonstrated:
- @tool with per-parameter descriptions
- Several tool calls answered in one turn
- Inspecting the executed tools on the result
"""

from llm_recipes import Assistant, get_logger, get_provider, setup_logging, tool

setup_logging()
logger = get_logger(__name__)


class CalculatorTools:
    """Integer arithmetic the model can delegate to."""

    @tool("Adds two integers", a="first addend", b="second addend")
    def add(self, a: int, b: int) -> int:
        logger.info("calculator_add", a=a, b=b)
        return a + b

    @tool("Multiplies two integers", a="first factor", b="second factor")
    def multiply(self, a: int, b: int) -> int:
        logger.info("calculator_multiply", a=a, b=b)
        return a * b


def main() -> None:
    """Run the assistant tools example."""
    print("=" * 60)
    print("Assistant Tools Example")
    print("=" * 60)

    assistant = Assistant(get_provider(), tools=[CalculatorTools()])

    for question in ("What is 1+2 and 3*4?", "Calculate 5 plus 7 and 3 times 8"):
        result = assistant.chat_result(question)
        print(f"\nUser: {question}")
        for execution in result.tool_executions:
            print(f"  tool {execution.request.name}({execution.request.arguments}) -> {execution.result}")
        print(f"Assistant: {result.content}")


if __name__ == "__main__":
    main()
