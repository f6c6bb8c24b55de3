#!/usr/bin/env python3
"""
Oracle Lab CLI – one entry point to run every attack demo.

Usage:
  Interactive menu:
    python oracle_lab_cli.py

  Non-interactive:
    python oracle_lab_cli.py --run modes
    python oracle_lab_cli.py --run padding --log-level DEBUG
    python oracle_lab_cli.py --run timing --plot out/timing.png
    python oracle_lab_cli.py --run all
"""

from __future__ import annotations

import argparse
import logging
import os
import pathlib
import sys
import textwrap
import time

# Ensure relative repo imports work even if executed from another directory.
sys.path.insert(0, str(pathlib.Path(__file__).parent.resolve()))

from aes_modes.ecb_cbc_ctr import roundtrip_demo
from attacks.cbc_padding_oracle import demo_padding_oracle
from attacks.ctr_attacks import demo_ctr_attacks, demo_iv_key_recovery
from attacks.ecb_byte_at_a_time import demo_secret_suffix
from attacks.ecb_cut_paste import demo_cut_paste
from attacks.ecb_detector import demo_detection, demo_find_ecb
from attacks.length_extension import demo_length_extension
from attacks.mt19937_attacks import demo_mt19937
from attacks.timing_leak import demo_timing_attack
from reports.timing_dashboard import plot_timing_margins
from utils import console_ui

logger = logging.getLogger("oracle_lab")


def _print_summary(threat: str, misuse: str, evidence: str, remedy: str) -> None:
    console_ui.kv("Threat model", threat)
    console_ui.kv("Misuse shown", misuse)
    console_ui.kv("Evidence", evidence)
    console_ui.kv("Remedy", remedy)


def configure_logging(level: int | str = logging.INFO) -> None:
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def run_modes(args) -> bool:
    console_ui.section("Mode engine round-trip (ECB / CBC / CTR)")
    res = roundtrip_demo()
    console_ui.kv("Key", res["key"].hex())
    console_ui.kv("CBC IV", res["iv"].hex())
    console_ui.kv("CTR nonce", res["nonce"].hex())
    console_ui.kv("ECB ciphertext (first block)", res["ecb_ct"][:16].hex())
    ok = res["ok_ecb"] and res["ok_cbc"] and res["ok_ctr"]
    console_ui.kv("Round-trips", f"ecb={res['ok_ecb']} cbc={res['ok_cbc']} ctr={res['ok_ctr']}")
    return ok


def run_detect(args) -> bool:
    console_ui.section("ECB / CBC detection oracle")
    res = demo_detection(trials=10, seed=args.seed if args.seed is not None else 12345)
    for i, (guess, truth) in enumerate(zip(res["guesses"], res["truths"]), start=1):
        console_ui.bullet(f"Trial {i:02d}: guessed {guess.name}, actual {truth.name}")
    batch = demo_find_ecb()
    console_ui.kv(
        "ECB ciphertext in batch",
        f"index {batch['index']} of {batch['count']} ({batch['repeats']} repeated blocks)",
    )
    console_ui.section("Summary")
    _print_summary(
        "attacker chooses plaintext",
        "ECB maps equal blocks to equal ciphertext",
        f"{res['correct']}/{res['trials']} trials classified correctly; "
        f"batch pick correct: {batch['index'] == batch['truth']}",
        "Never use ECB for data longer than one block",
    )
    return res["correct"] == res["trials"] and batch["index"] == batch["truth"]


def run_ecb(args) -> bool:
    console_ui.section("Byte-at-a-time ECB decryption")
    res = demo_secret_suffix(prefix_length=23, seed=args.seed if args.seed is not None else 1337)
    profile = res["profile"]
    console_ui.kv("Block size", str(profile.block_size))
    console_ui.kv("Prefix length", str(profile.prefix_length))
    console_ui.kv("Suffix length", str(profile.message_length))
    console_ui.kv("Oracle queries", str(res["queries"]))
    console_ui.recovered("Recovered suffix", res["recovered"])
    console_ui.section("Summary")
    _print_summary(
        "attacker controls part of an ECB-encrypted message",
        "secret appended after attacker input under ECB",
        f"suffix recovered exactly: {res['ok']}",
        "Use an authenticated randomized mode (AES-GCM)",
    )
    return res["ok"]


def run_padding(args) -> bool:
    console_ui.section("CBC padding oracle")
    res = demo_padding_oracle(rounds=3, seed=args.seed if args.seed is not None else 54321)
    for item in res["results"]:
        console_ui.recovered(f"Recovered ({item['queries']} queries)", item["recovered"])
    console_ui.section("Summary")
    _print_summary(
        "attacker submits ciphertexts and sees padding errors",
        "distinguishable padding failures on unauthenticated CBC",
        f"all plaintexts recovered: {res['ok']}",
        "Encrypt-then-MAC or AEAD; uniform error responses",
    )
    return res["ok"]


def run_ctr(args) -> bool:
    console_ui.section("CTR / CBC malleability")
    res = demo_ctr_attacks(seed=args.seed if args.seed is not None else 2024)
    console_ui.kv("Edit-oracle keystream recovery", str(res["edit_recovered"]))
    console_ui.kv("CTR bit-flip admin cookie", str(res["ctr_admin"]))
    console_ui.kv("CBC bit-flip admin cookie", str(res["cbc_admin"]))
    ok = res["edit_recovered"] and res["ctr_admin"] and res["cbc_admin"]
    console_ui.section("Summary")
    _print_summary(
        "attacker edits or tampers with unauthenticated ciphertext",
        "CTR and CBC without integrity protection",
        f"plaintext recovered and admin role injected: {ok}",
        "Authenticate ciphertexts (AES-GCM or encrypt-then-MAC)",
    )
    return ok


def run_cut_paste(args) -> bool:
    console_ui.section("ECB cut-and-paste profile forgery")
    res = demo_cut_paste(seed=args.seed if args.seed is not None else 13)
    for key, value in res["profile"].items():
        console_ui.kv(key.decode(errors="backslashreplace"), value.decode(errors="backslashreplace"))
    console_ui.section("Summary")
    _print_summary(
        "attacker registers emails and receives ECB-encrypted profile tokens",
        "independent ECB blocks can be spliced across tokens",
        f"forged token parses as admin: {res['ok']}",
        "Authenticated encryption; never trust client-held ECB tokens",
    )
    return res["ok"]


def run_cbc_key(args) -> bool:
    console_ui.section("CBC with IV = key")
    res = demo_iv_key_recovery(seed=args.seed if args.seed is not None else 2024)
    console_ui.kv("Real key", res["key"].hex())
    console_ui.kv("Recovered key", res["cracked_key"].hex())
    console_ui.section("Summary")
    _print_summary(
        "attacker sees decryption error reports",
        "key reused as IV",
        f"key recovered: {res['key_ok']}",
        "Random IV per message; never echo plaintext in errors",
    )
    return res["key_ok"]


def run_length_extension(args) -> bool:
    console_ui.section("Secret-prefix MAC length extension")
    ok = True
    for algorithm in ("sha1", "md4"):
        res = demo_length_extension(algorithm=algorithm)
        console_ui.kv(f"{algorithm} original MAC", res["mac"].hex())
        console_ui.kv(f"{algorithm} key length", str(res["key_length"]))
        console_ui.recovered(f"{algorithm} forged message", res["forged_message"])
        console_ui.kv(f"{algorithm} forged MAC", res["forged_mac"].hex())
        ok = ok and res["ok"]
    console_ui.section("Summary")
    _print_summary(
        "attacker sees one (message, MAC) pair",
        "MAC = H(key || message) with a Merkle-Damgard hash",
        f"forgeries accepted: {ok}",
        "Use HMAC",
    )
    return ok


def run_mt19937(args) -> bool:
    console_ui.section("MT19937 cloning and seed recovery")
    res = demo_mt19937()
    console_ui.kv("Next outputs (reference)", " ".join(f"{x:08x}" for x in res["actual"][:4]))
    console_ui.kv("Next outputs (clone)", " ".join(f"{x:08x}" for x in res["predicted"][:4]))
    console_ui.kv("Timestamp seed", f"{res['seed']} -> found {res['found_seed']}")
    return res["clone_ok"] and res["seed_ok"]


def run_timing(args) -> bool:
    console_ui.section("Timing leak in an early-exit comparison")
    res = demo_timing_attack(seed=args.seed if args.seed is not None else 31)
    console_ui.kv("Trials per candidate", str(res["trials"]))
    console_ui.kv("Comparisons made", str(res["comparisons"]))
    console_ui.kv("Expected HMAC", res["expected"].hex())
    console_ui.kv("Recovered HMAC", res["recovered"].hex())
    if args.plot:
        path = plot_timing_margins(res["trace"], args.plot)
        console_ui.kv("Timing plot", str(path.resolve()))
    console_ui.section("Summary")
    _print_summary(
        "attacker measures response time",
        "byte comparison returns at the first mismatch",
        f"signature accepted: {res['ok']}",
        "Constant-time comparison (hmac.compare_digest)",
    )
    return res["ok"]


DEMOS = {
    "modes": ("Mode engine round-trip", run_modes),
    "detect": ("ECB/CBC detection", run_detect),
    "ecb": ("Byte-at-a-time ECB", run_ecb),
    "cut-paste": ("ECB cut-and-paste", run_cut_paste),
    "padding": ("CBC padding oracle", run_padding),
    "ctr": ("CTR/CBC bit flipping", run_ctr),
    "cbc-key": ("CBC IV = key recovery", run_cbc_key),
    "length-extension": ("Length extension (SHA-1, MD4)", run_length_extension),
    "mt19937": ("MT19937 clone and seed", run_mt19937),
    "timing": ("Timing side channel", run_timing),
}


def run_one(name: str, args) -> bool:
    title, func = DEMOS[name]
    start = time.perf_counter()
    try:
        ok = func(args)
    except Exception as exc:  # pragma: no cover - runtime safeguard
        logger.exception("Demo %s failed", name)
        console_ui.error(f"Demo failed: {exc}")
        return False
    finally:
        console_ui.elapsed("DONE in", time.perf_counter() - start)
        console_ui.line()
    if ok:
        console_ui.success(f"{title}: attack succeeded.")
    else:
        console_ui.warning(f"{title}: attack did not reach the expected result.")
    return ok


def run_all(args) -> bool:
    names = list(DEMOS)
    results = []
    for index, name in enumerate(names, start=1):
        console_ui.step_header(index, len(names), DEMOS[name][0])
        results.append(run_one(name, args))
    passed = sum(results)
    console_ui.section("All demos")
    console_ui.kv("Succeeded", f"{passed}/{len(names)}")
    return all(results)


def menu() -> str:
    console_ui.banner("Oracle Lab")
    console_ui.bullet("Choose an attack to run:")
    for i, (title, _) in enumerate(DEMOS.values(), start=1):
        print(f"  {i}) {title}")
    print(f"  {len(DEMOS) + 1}) Run ALL (in order)")
    print("  0) Exit")
    return input("\nEnter choice: ").strip()


def parse_args(argv=None):
    ap = argparse.ArgumentParser(
        description="Oracle Lab CLI: adaptive chosen-plaintext/ciphertext attack demos.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""
        Examples:
          python oracle_lab_cli.py
          python oracle_lab_cli.py --run ecb
          python oracle_lab_cli.py --run all --plain
        """),
    )
    ap.add_argument("--run", choices=[*DEMOS, "all"], help="Run a specific demo non-interactively.")
    ap.add_argument("--seed", type=int, help="Seed for the demo oracles (defaults per demo).")
    ap.add_argument("--plot", type=pathlib.Path, help="Write the timing-leak plot to this path.")
    ap.add_argument("--plain", action="store_true", help="Disable colors/banners; print plain ASCII.")
    ap.add_argument(
        "--log-level",
        default=os.environ.get("ORACLE_LAB_LOG_LEVEL", "WARNING"),
        help="Logging verbosity (DEBUG, INFO, WARNING, ...)",
    )
    return ap.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    console_ui.init(plain=args.plain)
    if args.run:
        ok = run_all(args) if args.run == "all" else run_one(args.run, args)
        return 0 if ok else 1

    names = list(DEMOS)
    while True:
        choice = menu()
        if choice == "0" or choice.lower() in {"q", "quit", "exit"}:
            print("Goodbye!")
            return 0
        if choice == str(len(names) + 1):
            run_all(args)
        elif choice.isdigit() and 1 <= int(choice) <= len(names):
            run_one(names[int(choice) - 1], args)
        else:
            print(f"Invalid choice. Please select 0–{len(names) + 1}.")
        input("\nPress Enter to return to the main menu...")


if __name__ == "__main__":
    sys.exit(main())
