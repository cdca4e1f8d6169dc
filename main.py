"""CLI entry point for the Fan Duct Generator.

Usage:
    python main.py --analyze                     # Section table + pre-generation checks
    python main.py --generate                    # Generate STL (with validation gate)
    python main.py --generate --method hull      # Use the chained-hull shell
    python main.py --config custom.yaml --analyze  # Use custom config
    python main.py --validate-only               # Validate the existing STL
    python main.py --view                        # Open interactive 3D viewer
    python main.py --generate --preview duct.png # Generate then render a preview image
"""

import argparse
import sys
import os

from src.config import load_config, ConfigError, METHODS
from src.assembly import DuctAssembly
from validation.report_generator import ReportGenerator


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Parametric 140mm Fan Duct Generator"
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="Path to YAML configuration file (default: config/default.yaml)"
    )
    parser.add_argument(
        "--analyze", action="store_true",
        help="Print the section table and run pre-generation checks"
    )
    parser.add_argument(
        "--generate", action="store_true",
        help="Generate the STL file (gated by validation)"
    )
    parser.add_argument(
        "--method", choices=METHODS, default=None,
        help="Shell construction method (default: shell.method from config)"
    )
    parser.add_argument(
        "--output", type=str, default=None,
        help="STL output path (default: output/<output.filename>)"
    )
    parser.add_argument(
        "--validate-only", action="store_true",
        help="Run mesh validation on the existing STL"
    )
    parser.add_argument(
        "--force", action="store_true",
        help="Generate the STL even if validation fails (use with caution)"
    )
    parser.add_argument(
        "--view", action="store_true",
        help="Open interactive 3D viewer for the STL"
    )
    parser.add_argument(
        "--preview", type=str, default=None, metavar="PNG",
        help="Render an off-screen preview image of the STL"
    )

    args = parser.parse_args(argv)

    if not any([args.analyze, args.generate, args.validate_only, args.view, args.preview]):
        parser.print_help()
        sys.exit(1)

    # Load configuration
    try:
        print("Loading configuration...")
        config = load_config(args.config)
        print(f"  Fan:     {config['fan']['size']:.0f}mm, intake ⌀{config['fan']['intake_diameter']}mm")
        print(f"  Egress:  {config['egress']['width']}x{config['egress']['height']}mm")
        print(f"  Path:    {config['derived']['path_length']:.1f}mm, "
              f"bend {config['path']['bend_angle']}°, twist {config['path']['twist']}°")
        print(f"  Method:  {args.method or config['shell']['method']}")
    except ConfigError as e:
        print(f"Configuration error:\n{e}", file=sys.stderr)
        sys.exit(1)

    stl_path = args.output or default_stl_path(config)

    if args.analyze:
        run_analysis(config)
    if args.generate:
        run_generate(config, args.method, stl_path, args.force)
    if args.validate_only:
        run_validate_only(config, stl_path)
    if args.view:
        run_view(config, stl_path)
    if args.preview:
        run_preview(config, stl_path, args.preview)


def default_stl_path(config):
    output_cfg = config.get("output", {})
    return os.path.join(
        os.path.dirname(os.path.abspath(__file__)),
        output_cfg.get("directory", "output"),
        output_cfg.get("filename", "fan_duct.stl"),
    )


def run_analysis(config):
    """Step 1: Section table + validation report."""
    print("\n" + "=" * 60)
    print("RUNNING SECTION ANALYSIS AND VALIDATION")
    print("=" * 60)

    assembly = DuctAssembly(config)
    analysis = assembly.run_analysis()

    report_gen = ReportGenerator(config)
    report_text = report_gen.generate_validation_report(analysis)
    report_gen.generate_bom()

    print(report_text)
    print(f"\nReport saved to: {os.path.join(report_gen.output_dir, 'validation_report.txt')}")
    print(f"BOM saved to: {os.path.join(report_gen.output_dir, 'bom.txt')}")

    if analysis["all_passed"]:
        print("\n*** ALL VALIDATIONS PASSED ***")
        print("Ready for geometry generation: python main.py --generate")
    else:
        print(f"\n*** {len(analysis['failures'])} VALIDATION FAILURE(S) ***")
        print("Review report and adjust config before generating geometry.")
        print("Use --force to override (not recommended).")

    return analysis


def run_generate(config, method=None, stl_path=None, force=False):
    """Step 2: Generate the STL with validation gate."""
    print("\n" + "=" * 60)
    print("GENERATING CAD GEOMETRY")
    print("=" * 60)

    assembly = DuctAssembly(config)

    print("Running pre-generation validation...")
    analysis = assembly.run_analysis()

    if not analysis["all_passed"] and not force:
        print("\nValidation FAILED. Cannot generate geometry.")
        print("Failures:")
        for f in analysis["failures"]:
            print(f"  - {f}")
        print("\nUse --force to override (not recommended)")
        print("Or run --analyze for full report with suggestions")
        sys.exit(1)
    elif not analysis["all_passed"] and force:
        print("\nWARNING: Validation failed but --force specified. Proceeding...")

    print(f"\nGenerating geometry ({method or config['shell']['method']})...")
    result = assembly.generate_and_export(method, stl_path)
    mesh_result = result["mesh_result"]

    print(f"\nExported: {result['exported_file']}")
    status = "PASS" if mesh_result.passed else "FAIL"
    print(f"Mesh validation: {status}")
    for d in mesh_result.details:
        print(f"  {d}")

    report_gen = ReportGenerator(config)
    report_gen.generate_validation_report(analysis, mesh_result)
    report_gen.generate_bom(mesh_result.volume_mm3)
    print(f"\nReports saved to {report_gen.output_dir}")

    return result


def run_validate_only(config, stl_path):
    """Validate an existing STL file."""
    from validation.mesh_validator import MeshValidator

    if not os.path.exists(stl_path):
        print(f"No STL found at {stl_path}. Generate it first with --generate.")
        sys.exit(1)

    validator = MeshValidator(config)
    name = os.path.basename(stl_path)
    result = validator.validate_stl_file(stl_path, name, check_intake_seam=True)
    status = "PASS" if result.passed else "FAIL"
    print(f"  [{status}] {name}: "
          f"{'watertight' if result.is_watertight else 'NOT watertight'}, "
          f"bodies={result.body_count}, seam loops={result.seam_loops}, "
          f"vol={result.volume_mm3:.0f}mm³, "
          f"bb={result.bounding_box[0]:.1f}x{result.bounding_box[1]:.1f}x{result.bounding_box[2]:.1f}mm")
    return result


def run_view(config, stl_path):
    """Open interactive 3D viewer for the generated STL."""
    from src.viewer import view_part

    if not os.path.exists(stl_path):
        print(f"No STL found at {stl_path}. Generate it first with --generate.")
        sys.exit(1)

    print(f"\nOpening viewer for {stl_path}...")
    view_part(stl_path, config)


def run_preview(config, stl_path, image_path):
    """Render an off-screen preview image of the generated STL."""
    from src.viewer import render_preview

    if not os.path.exists(stl_path):
        print(f"No STL found at {stl_path}. Generate it first with --generate.")
        sys.exit(1)

    render_preview(stl_path, image_path, config)
    print(f"Preview saved to: {image_path}")


if __name__ == "__main__":
    main()
