class bcolors:
	OKBLUE = '\033[94m'
	ENDC = '\033[0m'
