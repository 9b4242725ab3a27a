"""
Literal fallback payloads served when a read-only upstream lookup fails.

Shapes follow the planapi responses the client app already parses, so they must
not be canonicalized or reformatted.
"""

UNKNOWN_OPERATOR = {"Operator": "Unknown", "OpCode": ""}

# leading digits -> best-guess operator (caller-space codes)
OPERATOR_PREFIXES = {
    "6": {"Operator": "Jio", "OpCode": "11"},
    "70": {"Operator": "Jio", "OpCode": "11"},
    "79": {"Operator": "Jio", "OpCode": "11"},
    "89": {"Operator": "Jio", "OpCode": "11"},
    "73": {"Operator": "Airtel", "OpCode": "2"},
    "98": {"Operator": "Airtel", "OpCode": "2"},
    "99": {"Operator": "Airtel", "OpCode": "2"},
    "97": {"Operator": "Vodafone", "OpCode": "23"},
    "96": {"Operator": "Vodafone", "OpCode": "23"},
    "95": {"Operator": "Idea", "OpCode": "6"},
    "94": {"Operator": "BSNL", "OpCode": "5"},
}

PLAN_CATALOG = {
    "FULLTT": [
        {"rs": 199, "validity": "28 days", "desc": "1.5GB/day, unlimited calls, 100 SMS/day"},
        {"rs": 299, "validity": "28 days", "desc": "2GB/day, unlimited calls, 100 SMS/day"},
        {"rs": 719, "validity": "84 days", "desc": "1.5GB/day, unlimited calls, 100 SMS/day"},
    ],
    "DATA": [
        {"rs": 19, "validity": "1 day", "desc": "1GB data"},
        {"rs": 58, "validity": "Existing plan", "desc": "3GB data"},
    ],
    "TOPUP": [
        {"rs": 10, "validity": "NA", "desc": "Talktime Rs 7.47"},
        {"rs": 100, "validity": "NA", "desc": "Talktime Rs 81.75"},
    ],
}
