"""
ABI of the IoT privacy registry contract (the subset this service calls).
"""

CONTRACT_ABI = [
    # ── Reads ───────────────────────────────────────────────────────────────
    {
        "name": "getTotalDevices",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "getTotalDataRecords",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "getDeviceInfo",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "deviceIndex", "type": "uint256"}],
        "outputs": [
            {"name": "deviceId", "type": "string"},
            {"name": "deviceOwner", "type": "address"},
            {"name": "isActive", "type": "bool"},
            {"name": "registrationTime", "type": "uint256"},
            {"name": "lastUpdateTime", "type": "uint256"},
        ],
    },
    {
        "name": "getDataRecord",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "recordId", "type": "uint256"}],
        "outputs": [
            {"name": "deviceIndex", "type": "uint256"},
            {"name": "dataType", "type": "uint8"},
            {"name": "timestamp", "type": "uint256"},
            {"name": "submitter", "type": "address"},
        ],
    },
    {
        "name": "getDeviceByString",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "deviceId", "type": "string"}],
        "outputs": [
            {"name": "deviceIndex", "type": "uint256"},
            {"name": "exists", "type": "bool"},
        ],
    },
    {
        "name": "getDeviceDataCount",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "deviceIndex", "type": "uint256"}],
        "outputs": [{"name": "count", "type": "uint256"}],
    },
    {
        "name": "isThresholdSet",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "deviceIndex", "type": "uint256"},
            {"name": "dataType", "type": "uint8"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    # ── Writes ──────────────────────────────────────────────────────────────
    {
        "name": "registerDevice",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "deviceId", "type": "string"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "submitData",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "deviceIndex", "type": "uint256"},
            {"name": "value", "type": "uint32"},
            {"name": "dataType", "type": "uint8"},
        ],
        "outputs": [],
    },
    {
        "name": "setThreshold",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "deviceIndex", "type": "uint256"},
            {"name": "dataType", "type": "uint8"},
            {"name": "minValue", "type": "uint32"},
            {"name": "maxValue", "type": "uint32"},
        ],
        "outputs": [],
    },
    {
        "name": "deactivateDevice",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "deviceIndex", "type": "uint256"}],
        "outputs": [],
    },
]
