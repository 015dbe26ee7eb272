"""Test suite for interolog"""
