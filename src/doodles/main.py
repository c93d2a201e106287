import logging

from doodles.playground import Playground2D
from doodles.worlds.poisson_world import PoissonWorld, PoissonWorldConfig


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s: %(message)s")
    world = PoissonWorld(PoissonWorldConfig())
    # world = PoissonWorld(PoissonWorldConfig(width=300, height=150, seed=6, samples_per_frame=4))
    pg = Playground2D(world)
    pg.run()


if __name__ == "__main__":
    main()
