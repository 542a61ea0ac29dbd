from dataclasses import dataclass

from rich.pretty import pprint

from argrouter import *


@dataclass
class Options:
    retries: int = option("retries", default=1)
    verbose: bool = option("verbose", default=False)


@dataclass
class Arguments:
    source: str
    target: str


router = Router(help=printhelp)


@router.route("files copy", help="files copy [-retries N] [-verbose BOOL] SOURCE TARGET")
def callback(options: Options, arguments: Arguments):
    pprint((options, arguments))


if __name__ == '__main__':
    pprint(router)
    outcome = router.run()
    if outcome.error:
        trigger(outcome.error, shell=True, fancy=True)
