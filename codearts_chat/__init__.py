"""Chat assistant that routes messages to Huawei CodeArts tools."""
