"""
Demo measurement dataset.

Sample probe output from a healthy Frontline Mark I install, used by
`frontline-diagnose --demo` and as a realistic baseline in tests.
Satellite backup is enabled but offline and a firmware update is
pending, so the demo summary is "Good (with advisories)".
"""

from .snapshots import SnapshotSet

DEMO_PROBE_RESULTS = {
    'ethernet': {
        'link_detected': 'Yes',
        'duplex': 'Full',
        'internet': 'online',
        'ipv4_present': True,
        'rx_errors': 0,
        'tx_errors': 0,
        'rx_dropped': 76,
        'speed': '1000 Mb/s',
        'autonegotiation': 'On',
        'state': 'online',
        'ipv6_present': True,
        'ipv4_address': '192.168.7.31',
        'netmask': '255.255.252.0',
        'dns': '192.168.4.1, fdd5:f30b:67fe:1::1',
    },
    'wifi': {
        'powered': True,
        'connected': True,
        'provisioned': False,
        'ssid': 'Southern Cousin',
        'strength_percent': 100,
        'strength_label': 'strong',
        'internet': 'online',
        'packet_loss_pct': 0,
        'frequency_mhz': 2412,
        'avg_latency_ms': 26.2,
        'tx_bitrate': '144.4 MBit/s',
        'ipv4_address': '192.168.7.29',
        'ipv6_present': True,
        'dns': '192.168.4.1, fdd5:f30b:67fe:1::1',
        'check_result': 'Success',
    },
    'cellular': {
        'internet': 'online',
        'state': 'ready',
        'provider_id': '311480',
        'provider_name': 'Verizon',
        'strength_percent': 60,
        'strength_label': 'average',
        'packet_loss_pct': 0,
        'avg_latency_ms': 333,
        'ipv4_present': True,
        'ipv6_present': False,
        'dns': '198.224.169.135, 198.224.171.135',
        'imei': '356789012345678',
        'iccid': '89014103211118510720',
    },
    'satellite': {
        'enabled': True,
        'state': 'offline',
        'imei': '357111112222333',
    },
    'power': {
        'voltage': 13.4,
    },
    'manifold': {
        'psi': 45,
        'expected_low': 30,
        'expected_high': 80,
        'last_test': 'Just now',
    },
    'source': {
        'psi': 62,
        'expected_low': 30,
        'expected_high': 80,
        'source_type': 'Municipal',
        'stability': 'Steady',
    },
    'cloud': {
        'reachable': True,
        'ping_ms': 42,
        'endpoint': 'api.frontline.example',
        'last_sync': 'Just now',
    },
    'firmware': {
        'version': 'r3.0.8',
        'supported': True,
        'update_available': True,
    },
}


def demo_snapshots() -> SnapshotSet:
    """Fresh SnapshotSet built from the demo dataset."""
    return SnapshotSet.from_dict(DEMO_PROBE_RESULTS)
