"""Execview parsers: record schemas, decoders and format dispatch."""
