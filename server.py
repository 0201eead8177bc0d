#!/usr/bin/env python3
"""
Razorpay Payment Relay - Entry Point
"""

from payrelay.main import run

if __name__ == "__main__":
    run()
