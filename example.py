#!/usr/bin/env python3
"""
Example usage of the lifegrid package.
"""

from lifegrid import GridStore, PatternLibrary, Simulation
from lifegrid.frontends.cli import render_world


def main():
    """Demonstrate programmatic usage of the lifegrid package."""
    store = GridStore(20, 20)

    # Load a pattern
    library = PatternLibrary()
    glider = library.get_pattern("Glider")

    if glider:
        # Apply glider pattern near the top-left corner
        glider.apply_to_store(store, offset_x=2, offset_y=2)

    simulation = Simulation(store)

    print("Initial state:")
    print(render_world(store))
    print(f"Population: {simulation.population}")
    print()

    # Run simulation for 10 generations
    for _ in range(10):
        simulation.step()
        print(f"Generation {simulation.generation}:")
        print(render_world(store))
        print(f"Population: {simulation.population}")

        if simulation.cycle_detected:
            print(f"Cycle detected! Length: {simulation.cycle_length}")
            break

        print()

    # Show statistics
    stats = simulation.get_statistics()
    print("Final statistics:")
    for key, value in stats.items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    main()
