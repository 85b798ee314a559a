#!/usr/bin/env python3
"""
Random program monkey for the edit VM.
Builds random trees, replays random edit programs against them and checks
that the cursor invariant holds and that every failure is a VM error.
"""

import argparse
import random
import string
import sys
import time
import traceback

from editvm import Node, TreeVM, VMError, element, text
from editvm.vm import INSTRUCTIONS

TAGS = ["div", "span", "p", "a", "b", "i", "em", "strong", "ul", "li", "section", "blockquote"]
ATTRIBUTES = ["id", "class", "style", "href", "title", "data-x", "role"]


def random_string(min_len=0, max_len=12):
    length = random.randint(min_len, max_len)
    return "".join(random.choice(string.ascii_letters + " ,.") for _ in range(length))


def random_attrs():
    return {name: random_string(0, 6) for name in random.sample(ATTRIBUTES, random.randint(0, 3))}


def random_tree(depth=0, max_depth=4):
    node = element(random.choice(TAGS), random_attrs())
    for _ in range(random.randint(0, 5)):
        if depth < max_depth and random.random() < 0.4:
            node.append_child(random_tree(depth + 1, max_depth))
        else:
            node.append_child(text(random_string(1)))
    return node


def random_document():
    root = Node("#document")
    for _ in range(random.randint(0, 6)):
        root.append_child(random_tree() if random.random() < 0.6 else text(random_string(1)))
    return root


def valid_instruction(vm):
    """Pick an instruction whose preconditions hold for the VM's current state."""
    frame = vm.stack.top()
    remaining = len(frame.container.children) - frame.index
    current = vm.current_node()

    choices = [("InsertDocString", random_string())]
    if remaining:
        choices.append(("AdvanceElements", random.randint(0, remaining)))
        choices.append(("DeleteElements", random.randint(1, remaining)))
    if current is not None and current.is_element:
        choices.extend([("Enter",)] * 3)
    if vm.depth > 1:
        choices.append(("Unenter",))
        choices.append(("UnwrapSelf",))
    if frame.index:
        choices.append(("WrapPrevious", random.randint(0, frame.index), random_attrs()))
    return random.choice(choices)


def random_instruction():
    op = random.choice(list(INSTRUCTIONS))
    if op in ("AdvanceElements", "DeleteElements"):
        return (op, random.randint(-1, 6))
    if op == "InsertDocString":
        return (op, random_string())
    if op == "WrapPrevious":
        return (op, random.randint(-1, 6), random_attrs())
    return (op,)


def finish(vm, program):
    """Walk the cursor out to the end of the root."""
    while vm.depth > 1:
        program.append(("Unenter",))
        vm.unenter()
    frame = vm.stack.top()
    rest = len(frame.container.children) - frame.index
    program.append(("AdvanceElements", rest))
    vm.advance_elements(rest)


def run_valid_case(max_steps):
    root = random_document()
    # Re-based wrapping keeps every frame in range, so the invariant is checkable
    vm = TreeVM(root, wrap_cursor="after")
    program = []
    for _ in range(random.randint(0, max_steps)):
        instruction = valid_instruction(vm)
        program.append(instruction)
        vm.apply(*instruction)
        vm.stack.check()
    finish(vm, program)
    if not vm.is_done():
        raise AssertionError("program walked to the end of the root but is_done() is False")
    return program


def run_random_case(max_steps):
    vm = TreeVM(random_document())
    program = []
    for _ in range(random.randint(0, max_steps)):
        instruction = random_instruction()
        program.append(instruction)
        try:
            vm.apply(*instruction)
        except VMError:
            break
    return program


def run_fuzzer(num_tests, seed=None, verbose=False, max_steps=40):
    if seed is not None:
        random.seed(seed)

    print(f"Fuzzing edit VM with {num_tests} programs...")
    failures = []
    start = time.time()

    for i in range(num_tests):
        program = []
        try:
            if i % 2 == 0:
                program = run_valid_case(max_steps)
            else:
                program = run_random_case(max_steps)
            if verbose:
                print(f"  #{i}: {len(program)} instructions ok")
        except Exception as e:
            failures.append({
                "test_num": i,
                "program": program,
                "error": f"{type(e).__name__}: {e}",
                "traceback": traceback.format_exc(),
            })
            if verbose:
                print(f"  #{i}: FAILED {type(e).__name__}: {e}")

    elapsed = time.time() - start
    print(f"\n{num_tests} programs in {elapsed:.2f}s, {len(failures)} failures")

    for failure in failures[:10]:
        print(f"\nTest #{failure['test_num']}:")
        print(f"  Program: {failure['program']!r}")
        print(f"  Error: {failure['error']}")
        print(failure["traceback"])
    if len(failures) > 10:
        print(f"\n... and {len(failures) - 10} more failures")

    return not failures


def main():
    parser = argparse.ArgumentParser(description="Fuzz the edit VM with random programs")
    parser.add_argument(
        "--num-tests", "-n",
        type=int,
        default=1000,
        help="Number of programs to generate (default: 1000)",
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=40,
        help="Maximum instructions per program (default: 40)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Just print N sample documents and valid programs",
    )

    args = parser.parse_args()

    if args.sample:
        if args.seed is not None:
            random.seed(args.seed)
        for i in range(args.sample):
            print(f"=== Sample {i + 1} ===")
            print(run_valid_case(args.max_steps))
            print()
        return

    success = run_fuzzer(args.num_tests, seed=args.seed, verbose=args.verbose, max_steps=args.max_steps)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
