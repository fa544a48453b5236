import pytest

from ride_catalog import RideItem, load_ride_database
from ride_data_generator import generate_catalog, save_catalog_csv

CATALOG_SIZE = 8064


@pytest.fixture
def trivial_rides():
    return [
        RideItem("test Ferris Wheel", 10, 20.0),
        RideItem("test Speedway", 4, 5.0),
    ]


@pytest.fixture(scope="session")
def catalog_path(tmp_path_factory):
    _, rides = generate_catalog(CATALOG_SIZE, time_range=(0.0, 2500.0), seed=2024)
    path = tmp_path_factory.mktemp("catalog") / "ride.csv"
    save_catalog_csv(rides, str(path))
    return str(path)


@pytest.fixture(scope="session")
def all_rides(catalog_path):
    return load_ride_database(catalog_path)


@pytest.fixture
def make_catalog(tmp_path):
    """Write a catalog with the standard header followed by the given rows."""
    def write(lines, name="rides.csv"):
        path = tmp_path / name
        path.write_text("description^cost^time\n" + "".join(line + "\n" for line in lines),
                        encoding="utf-8")
        return str(path)
    return write
