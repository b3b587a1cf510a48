"""Stock Consensus MCP Server using FastMCP."""

import asyncio
import json
import logging
import os

from fastmcp import FastMCP

from stock_consensus import SCHEMA_VERSION, SERVER_VERSION
from stock_consensus.analyzers import default_registry
from stock_consensus.data.yfinance_client import shutdown_executor
from stock_consensus.engine import AnalysisSubject, InvalidSubjectError, run_analysis
from stock_consensus.engine.report import Report

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
logger = logging.getLogger(__name__)

mcp = FastMCP(
    name="stock-consensus",
)


async def _run(symbol: str, company_name: str | None) -> Report:
    subject = AnalysisSubject(symbol=symbol, company_name=company_name)
    return await run_analysis(subject, default_registry())


def _error_response(error: InvalidSubjectError, symbol: str) -> dict[str, str]:
    return {"error": "invalid_subject", "message": str(error), "symbol": str(symbol)}


@mcp.tool
async def analyze(symbol: str, company_name: str | None = None) -> str:
    """
    Consolidated buy/hold/sell signal for a stock.

    Runs every bundled analyzer (quote, technical, fundamental, risk,
    analyst, sentiment) concurrently and reduces their opinions to one
    weighted signal with a confidence score. Analyzers that fail are listed
    under run_health and in results; the report is still produced.

    Args:
        symbol: Stock ticker symbol (e.g., AAPL, MSFT)
        company_name: Display name (default: the symbol)

    Returns:
        JSON with consolidated_signal, confidence_score, votes,
        price_projections, run_health and per-analyzer results
    """
    try:
        report = await _run(symbol, company_name)
    except InvalidSubjectError as e:
        return json.dumps(_error_response(e, symbol), indent=2)
    return json.dumps(report.to_dict(), indent=2, default=str)


@mcp.tool
async def analyze_report(symbol: str, company_name: str | None = None) -> str:
    """
    Same analysis as ``analyze``, rendered as a plain-text report.

    Args:
        symbol: Stock ticker symbol
        company_name: Display name (default: the symbol)

    Returns:
        Human-readable report text
    """
    try:
        report = await _run(symbol, company_name)
    except InvalidSubjectError as e:
        return f"Cannot analyze {symbol!r}: {e}"
    return report.to_text()


def main() -> None:
    """Run the MCP server."""
    logger.info(f"Starting Stock Consensus MCP Server v{SERVER_VERSION} (schema v{SCHEMA_VERSION})")
    try:
        mcp.run()
    finally:
        asyncio.run(shutdown_executor())


if __name__ == "__main__":
    main()
