from panoview.__main__ import parse_args


def test_parse_args_defaults():
    args = parse_args([])
    assert args.image is None
    assert args.azimuth is None
    assert args.polar is None


def test_parse_args_direction():
    args = parse_args(["pano.jpg", "--azimuth", "-45", "--polar", "10.5"])
    assert args.image == "pano.jpg"
    assert args.azimuth == -45.0
    assert args.polar == 10.5
