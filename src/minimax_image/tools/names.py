"""Tool names exposed over MCP, plus the short aliases accepted by the registry."""

TOOL_GENERATE = "minimax_image_01_generate"
TOOL_GENERATE_ASYNC = "minimax_image_01_generate_async"
TOOL_GET_PREDICTION = "minimax_image_01_get_prediction"
TOOL_CANCEL_PREDICTION = "minimax_image_01_cancel_prediction"

TOOL_ALIASES: dict[str, str] = {
    "generate": TOOL_GENERATE,
    "generate_async": TOOL_GENERATE_ASYNC,
    "get_job": TOOL_GET_PREDICTION,
    "get_prediction": TOOL_GET_PREDICTION,
    "cancel_job": TOOL_CANCEL_PREDICTION,
    "cancel_prediction": TOOL_CANCEL_PREDICTION,
}

ALL_TOOLS = (TOOL_GENERATE, TOOL_GENERATE_ASYNC, TOOL_GET_PREDICTION, TOOL_CANCEL_PREDICTION)
