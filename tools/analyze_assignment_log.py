#!/usr/bin/env python3
"""
Analyze assignment debug logs to spot slot churn and claim contention.

Usage:
    python tools/analyze_assignment_log.py <log_file_path>
"""

import re
import sys
from collections import Counter, defaultdict
from pathlib import Path

LINE_RE = re.compile(r'^\[[\d:]+\] (\w+): (.+)$')
TIME_RE = re.compile(r'Time: ([\d.]+)s')


def parse_log_file(log_path):
    """Parse the debug log and extract key metrics."""

    categories = Counter()
    reassignments = defaultdict(list)
    denials = defaultdict(int)
    chaser_changes = defaultdict(list)
    fallbacks = defaultdict(int)
    possessions = []
    ticks = 0

    with open(log_path, 'r', encoding='utf-8') as f:
        for line in f:
            match = LINE_RE.match(line.strip())
            if not match:
                continue

            category, details = match.groups()
            categories[category] += 1
            time_match = TIME_RE.search(details)
            time = float(time_match.group(1)) if time_match else 0.0

            if category == 'TICK':
                ticks += 1

            elif category == 'ASSIGNMENT':
                agent_match = re.search(r'Agent (\d+)', details)
                slot_match = re.search(r'Slot: (\S+) -> (\S+)', details)
                if agent_match and slot_match:
                    reassignments[agent_match.group(1)].append((time, slot_match.group(1), slot_match.group(2)))

            elif category == 'CLAIM':
                agent_match = re.search(r'Agent (\d+)', details)
                if agent_match:
                    denials[agent_match.group(1)] += 1

            elif category == 'CHASER':
                side_match = re.search(r'Side: (\w+)', details)
                chaser_match = re.search(r'Chaser: (\S+) -> (\S+)', details)
                if side_match and chaser_match:
                    chaser_changes[side_match.group(1)].append((time, chaser_match.group(2)))

            elif category == 'FALLBACK':
                agent_match = re.search(r'Agent (\d+)', details)
                if agent_match:
                    fallbacks[agent_match.group(1)] += 1

            elif category == 'POSSESSION':
                state_match = re.search(r'State: (\S+)', details)
                if state_match:
                    possessions.append((time, state_match.group(1)))

    return {
        'categories': categories,
        'ticks': ticks,
        'reassignments': reassignments,
        'denials': denials,
        'chaser_changes': chaser_changes,
        'fallbacks': fallbacks,
        'possessions': possessions,
    }


def analyze_reassignments(reassignments):
    """Report how often each agent changed slot."""
    print("\n=== SLOT REASSIGNMENT ANALYSIS ===")
    total = sum(len(changes) for changes in reassignments.values())
    print(f"Total slot changes: {total}")

    for agent_id, changes in sorted(reassignments.items(), key=lambda x: int(x[0])):
        print(f"  Agent #{agent_id}: {len(changes)} changes")
        # A slot held, dropped and retaken within a second points at oscillation.
        flips = 0
        for i in range(2, len(changes)):
            if changes[i][2] == changes[i - 2][2] and changes[i][0] - changes[i - 2][0] < 1.0:
                flips += 1
        if flips:
            print(f"    ⚠️  {flips} quick flip-backs - consider a larger stickiness gain or cooldown")


def analyze_claims(denials):
    """Report claim contention between agents."""
    print("\n=== CLAIM CONTENTION ANALYSIS ===")
    total = sum(denials.values())
    print(f"Total denied claims: {total}")
    for agent_id, count in sorted(denials.items(), key=lambda x: -x[1]):
        print(f"  Agent #{agent_id}: {count} denials")


def analyze_chasers(chaser_changes):
    """Report chaser hand-overs per side."""
    print("\n=== CHASER ANALYSIS ===")
    for side, changes in chaser_changes.items():
        print(f"  {side}: {len(changes)} chaser changes")
        if len(changes) > 1:
            intervals = [changes[i + 1][0] - changes[i][0] for i in range(len(changes) - 1)]
            avg_interval = sum(intervals) / len(intervals)
            print(f"    Average time between changes: {avg_interval:.2f}s")


def analyze_fallbacks(fallbacks, ticks):
    """Report agents that spent time without a formation slot."""
    print("\n=== FALLBACK ANALYSIS ===")
    if not fallbacks:
        print("  No fallback positioning recorded")
        return
    for agent_id, count in sorted(fallbacks.items(), key=lambda x: int(x[0])):
        share = f" ({count / ticks * 100:.1f}% of ticks)" if ticks else ""
        print(f"  Agent #{agent_id}: {count} fallback ticks{share}")


def main():
    if len(sys.argv) < 2:
        print("Usage: python tools/analyze_assignment_log.py <log_file_path>")
        print("\nExample:")
        print("  python tools/analyze_assignment_log.py debug_logs/assignment_debug_20251117_222236.txt")
        sys.exit(1)

    log_path = Path(sys.argv[1])

    if not log_path.exists():
        print(f"Error: Log file not found: {log_path}")
        sys.exit(1)

    print(f"Analyzing: {log_path.name}")
    print("=" * 60)

    data = parse_log_file(log_path)

    print("\n=== EVENT SUMMARY ===")
    print(f"  Ticks: {data['ticks']}")
    for category, count in data['categories'].most_common():
        print(f"  {category}: {count}")

    print("\n=== POSSESSION STATES ===")
    for time, state in data['possessions']:
        print(f"  {time:6.2f}s  {state}")

    analyze_reassignments(data['reassignments'])
    analyze_claims(data['denials'])
    analyze_chasers(data['chaser_changes'])
    analyze_fallbacks(data['fallbacks'], data['ticks'])

    print("\n" + "=" * 60)
    print("Analysis complete!")


if __name__ == '__main__':
    main()
