"""Normalization layer: raw UCS Manager records to domain report sections."""
