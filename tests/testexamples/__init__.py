"""Rule classes exercised by the discovery and execution tests."""
