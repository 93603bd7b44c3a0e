import logging, argparse, os, sys, time

from .deschedule.constants import (DEFAULT_DESCHEDULING_INTERVAL, DEFAULT_KUBECONFIG,
                                   DEFAULT_MAX_PODS_TO_EVICT_PER_NODE)
from .deschedule.descheduler import Descheduler
from .deschedule.options import DeschedulerOptions
from .deschedule.policy import PolicyError, load_policy

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="K8s Descheduler: remove duplicate pods")
    parser.add_argument("--kubeconfig", type=str, default=DEFAULT_KUBECONFIG,
                        help="集群外运行时使用的 kubeconfig 路径")
    parser.add_argument("--policy-config-file", type=str, default="",
                        help="DeschedulerPolicy yaml 文件")
    parser.add_argument("--dry-run", action="store_true",
                        help="只计算、记录驱逐决策，不真正驱逐")
    parser.add_argument("--node-selector", type=str, default="",
                        help="只处理匹配该 label selector 的节点")
    parser.add_argument("--max-pods-to-evict-per-node", type=int,
                        default=DEFAULT_MAX_PODS_TO_EVICT_PER_NODE,
                        help="每个节点每轮最多驱逐的 Pod 数，<=0 不限制")
    parser.add_argument("--descheduling-interval", type=int,
                        default=DEFAULT_DESCHEDULING_INTERVAL,
                        help="两轮之间的间隔（秒），<=0 只跑一轮")
    parser.add_argument("--log", action="store_true", help="启用日志记录到文件")
    parser.add_argument("-v", "--verbose", action="store_true", help="输出 DEBUG 日志")
    return parser


def options_from_args(args: argparse.Namespace) -> DeschedulerOptions:
    return DeschedulerOptions(
        kubeconfig=args.kubeconfig,
        policy_config_file=args.policy_config_file,
        dry_run=args.dry_run,
        node_selector=args.node_selector,
        max_pods_to_evict_per_node=args.max_pods_to_evict_per_node,
        descheduling_interval=args.descheduling_interval,
    )


def setup_logging(to_file: bool, verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    if to_file:
        os.makedirs("logs", exist_ok=True)
        log_file = time.strftime("logs/%Y%m%d-%H%M%S.log")
        logging.basicConfig(filename=log_file, level=level,
                            encoding="utf-8", format=LOG_FORMAT)
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log, args.verbose)
    options = options_from_args(args)

    # 启动前先校验一次 policy，配置错误直接退出
    try:
        load_policy(options.policy_config_file)
    except PolicyError as exc:
        logging.error("invalid descheduler policy: %s", exc)
        return 1

    logging.info(f"Starting descheduler with interval={options.descheduling_interval}s, "
                 f"dry_run={options.dry_run}, "
                 f"max_pods_to_evict_per_node={options.max_pods_to_evict_per_node}")
    try:
        Descheduler(options).run_forever()
    except KeyboardInterrupt:
        logging.info("Stopping descheduler...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
