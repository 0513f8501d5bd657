"""Tests"""
